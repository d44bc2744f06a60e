from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint

from app.db.base import Base


class WatchlistItem(Base):
    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "player_id", name="uq_watchlist_user_player"),)
