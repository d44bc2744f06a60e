from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Index, text

from app.core.game_config import AUCTION_ACTIVE
from app.db.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Auction(Base):
    __tablename__ = "auctions"

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)

    starting_price = Column(Numeric(12, 2), nullable=False)
    # Cache de la puja más alta; es el valor que se usa para validar
    current_price = Column(Numeric(12, 2), nullable=False)
    current_winner_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    end_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(String, nullable=False, default=AUCTION_ACTIVE)  # active, completed, cancelled

    __table_args__ = (
        Index("ix_auction_status_end", "status", "end_time"),
        # Como mucho una subasta activa por jugador
        Index(
            "uq_auction_active_player",
            "player_id",
            unique=True,
            sqlite_where=text(f"status = '{AUCTION_ACTIVE}'"),
            postgresql_where=text(f"status = '{AUCTION_ACTIVE}'"),
        ),
    )


class Bid(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, index=True)
    auction_id = Column(Integer, ForeignKey("auctions.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
