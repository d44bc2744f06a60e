from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String

from app.core.game_config import INITIAL_BALANCE
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)  # guardado en minúsculas
    password_hash = Column(String, nullable=False)

    team_name = Column(String, nullable=False)
    balance = Column(Numeric(12, 2), nullable=False, default=INITIAL_BALANCE)
    avatar_url = Column(String, nullable=True)

    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
