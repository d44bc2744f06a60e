"""
Plain records handed out by every storage backend.

The engine and the routes only see these; the SQL backend maps ORM rows
onto them, the in-memory backend keeps them as-is. Records are frozen:
changes go through the store, which swaps in a new copy.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    team_name: str
    balance: Decimal
    avatar_url: Optional[str]
    is_admin: bool
    created_at: datetime


@dataclass(frozen=True)
class PlayerRecord:
    id: int
    username: str
    real_name: str
    specialty: str
    level: int
    accuracy: int
    reaction_time: int
    strategy: int
    win_rate: int
    experience: int
    rating: float
    leadership: Optional[int] = None
    team_coordination: Optional[int] = None
    map_awareness: Optional[int] = None
    survival_skills: Optional[int] = None
    resource_management: Optional[int] = None
    combat: Optional[int] = None
    image_url: Optional[str] = None
    owner_id: Optional[int] = None
    is_active: bool = True
    base_price: Decimal = Decimal("5000")
    is_released: bool = False
    available_for_auction: bool = False


@dataclass(frozen=True)
class AuctionRecord:
    id: int
    player_id: int
    starting_price: Decimal
    current_price: Decimal
    current_winner_id: Optional[int]
    start_time: datetime
    end_time: datetime
    status: str


@dataclass(frozen=True)
class BidRecord:
    id: int
    auction_id: int
    user_id: int
    amount: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class WatchlistRecord:
    id: int
    user_id: int
    player_id: int


# Columnas que se pueden pasar a create_player / update_player
PLAYER_FIELDS = tuple(
    name for name in PlayerRecord.__dataclass_fields__ if name != "id"
)
