from sqlalchemy import Column, Integer, String, Boolean, Float, Numeric, ForeignKey, Index

from app.core.game_config import DEFAULT_BASE_PRICE
from app.db.base import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)

    # Display info
    username = Column(String, nullable=False, index=True)  # gamer tag
    real_name = Column(String, nullable=False)
    specialty = Column(String, nullable=False)  # "FPS Expert", "MOBA Captain"...
    image_url = Column(String, nullable=True)

    # Ratings 1-100
    level = Column(Integer, nullable=False)
    accuracy = Column(Integer, nullable=False)
    reaction_time = Column(Integer, nullable=False)
    strategy = Column(Integer, nullable=False)
    leadership = Column(Integer, nullable=True)
    team_coordination = Column(Integer, nullable=True)
    map_awareness = Column(Integer, nullable=True)
    survival_skills = Column(Integer, nullable=True)
    resource_management = Column(Integer, nullable=True)
    combat = Column(Integer, nullable=True)

    win_rate = Column(Integer, nullable=False)
    experience = Column(Integer, nullable=False)  # years
    rating = Column(Float, nullable=False)  # 1-5 stars

    # NULL => free agent
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    is_active = Column(Boolean, nullable=False, default=True)
    base_price = Column(Numeric(12, 2), nullable=False, default=DEFAULT_BASE_PRICE)
    is_released = Column(Boolean, nullable=False, default=False)
    available_for_auction = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_players_owner_active", "owner_id", "is_active"),
    )
