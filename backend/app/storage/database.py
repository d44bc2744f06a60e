from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ImpermissibleState
from app.core.game_config import AUCTION_ACTIVE, AUCTION_COMPLETED
from app.models.auction import Auction, Bid
from app.models.players import Player
from app.models.user import User
from app.models.watchlist import WatchlistItem
from app.storage.records import (
    PLAYER_FIELDS,
    AuctionRecord,
    BidRecord,
    PlayerRecord,
    UserRecord,
    WatchlistRecord,
)

logger = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    if dt is None:
        return None
    # SQLite devuelve naive aunque la columna sea timezone=True: asumimos UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _user(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        team_name=row.team_name,
        balance=Decimal(row.balance),
        avatar_url=row.avatar_url,
        is_admin=bool(row.is_admin),
        created_at=_as_utc(row.created_at),
    )


def _player(row: Player) -> PlayerRecord:
    fields = {name: getattr(row, name) for name in PLAYER_FIELDS}
    fields["base_price"] = Decimal(row.base_price)
    return PlayerRecord(id=row.id, **fields)


def _auction(row: Auction) -> AuctionRecord:
    return AuctionRecord(
        id=row.id,
        player_id=row.player_id,
        starting_price=Decimal(row.starting_price),
        current_price=Decimal(row.current_price),
        current_winner_id=row.current_winner_id,
        start_time=_as_utc(row.start_time),
        end_time=_as_utc(row.end_time),
        status=row.status,
    )


def _bid(row: Bid) -> BidRecord:
    return BidRecord(
        id=row.id,
        auction_id=row.auction_id,
        user_id=row.user_id,
        amount=Decimal(row.amount),
        timestamp=_as_utc(row.timestamp),
    )


def _watch(row: WatchlistItem) -> WatchlistRecord:
    return WatchlistRecord(id=row.id, user_id=row.user_id, player_id=row.player_id)


class SqlStore:
    """
    AuctionStore over a SQLAlchemy session (one store per request).

    Conditional writes are single ``UPDATE ... WHERE`` statements, so the
    database decides who wins a race; the rowcount tells us.
    Writes outside ``transaction()`` are committed right away.
    """

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                logger.debug("Rolling back store transaction")
                self.db.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self.db.commit()

    def _written(self):
        if self._depth == 0:
            self.db.commit()

    def _q(self, model):
        # Las updates condicionales no pasan por el identity map: siempre releer
        return self.db.query(model).populate_existing()

    def _add(self, row):
        self.db.add(row)
        self.db.flush()
        self._written()
        self.db.refresh(row)
        return row

    # --- users ---
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        row = self._q(User).filter(User.id == user_id).first()
        return _user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        row = self._q(User).filter(User.username == username.strip().lower()).first()
        return _user(row) if row else None

    def create_user(self, username, password_hash, team_name, balance, is_admin=False, avatar_url=None):
        row = User(
            username=username.strip().lower(),
            password_hash=password_hash,
            team_name=team_name,
            balance=balance,
            avatar_url=avatar_url,
            is_admin=is_admin,
        )
        return _user(self._add(row))

    def list_users(self) -> list[UserRecord]:
        return [_user(u) for u in self._q(User).order_by(User.id.asc()).all()]

    def set_admin(self, user_id: int, is_admin: bool) -> Optional[UserRecord]:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.is_admin: is_admin}, synchronize_session=False)
        )
        self._written()
        return self.get_user(user_id) if updated else None

    def credit_balance(self, user_id: int, amount: Decimal) -> Optional[UserRecord]:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.balance: User.balance + amount}, synchronize_session=False)
        )
        self._written()
        return self.get_user(user_id) if updated else None

    def debit_balance(self, user_id: int, amount: Decimal) -> bool:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id, User.balance >= amount)
            .update({User.balance: User.balance - amount}, synchronize_session=False)
        )
        self._written()
        return updated == 1

    # --- players ---
    def get_player(self, player_id: int) -> Optional[PlayerRecord]:
        row = self._q(Player).filter(Player.id == player_id).first()
        return _player(row) if row else None

    def list_players(self) -> list[PlayerRecord]:
        return [_player(p) for p in self._q(Player).order_by(Player.id.asc()).all()]

    def list_players_by_owner(self, owner_id: int) -> list[PlayerRecord]:
        rows = self._q(Player).filter(Player.owner_id == owner_id).order_by(Player.id.asc()).all()
        return [_player(p) for p in rows]

    def count_players_by_owner(self, owner_id: int) -> int:
        return self.db.query(Player).filter(Player.owner_id == owner_id).count()

    def list_released_players(self) -> list[PlayerRecord]:
        rows = self._q(Player).filter(Player.is_released == True).order_by(Player.id.asc()).all()  # noqa: E712
        return [_player(p) for p in rows]

    def create_player(self, **fields) -> PlayerRecord:
        return _player(self._add(Player(**fields)))

    def update_player(self, player_id: int, **fields) -> Optional[PlayerRecord]:
        values = {getattr(Player, name): value for name, value in fields.items()}
        updated = (
            self.db.query(Player)
            .filter(Player.id == player_id)
            .update(values, synchronize_session=False)
        )
        self._written()
        return self.get_player(player_id) if updated else None

    def claim_player(self, player_id: int, owner_id: int) -> bool:
        updated = (
            self.db.query(Player)
            .filter(Player.id == player_id, Player.owner_id.is_(None))
            .update(
                {Player.owner_id: owner_id, Player.is_released: False, Player.available_for_auction: False},
                synchronize_session=False,
            )
        )
        self._written()
        return updated == 1

    # --- auctions ---
    def get_auction(self, auction_id: int) -> Optional[AuctionRecord]:
        row = self._q(Auction).filter(Auction.id == auction_id).first()
        return _auction(row) if row else None

    def list_auctions(self, status: Optional[str] = None) -> list[AuctionRecord]:
        q = self._q(Auction)
        if status:
            q = q.filter(Auction.status == status)
        return [_auction(a) for a in q.order_by(Auction.id.asc()).all()]

    def list_auctions_for_player(self, player_id: int) -> list[AuctionRecord]:
        rows = self._q(Auction).filter(Auction.player_id == player_id).order_by(Auction.id.asc()).all()
        return [_auction(a) for a in rows]

    def create_auction(self, player_id, starting_price, start_time, end_time) -> AuctionRecord:
        row = Auction(
            player_id=player_id,
            starting_price=starting_price,
            current_price=starting_price,
            current_winner_id=None,
            start_time=start_time,
            end_time=end_time,
            status=AUCTION_ACTIVE,
        )
        try:
            return _auction(self._add(row))
        except IntegrityError:
            # uq_auction_active_player: ya hay otra subasta activa del jugador
            if self._depth == 0:
                self.db.rollback()
            raise ImpermissibleState("Player is already in an active auction")

    def swap_auction_lead(self, auction_id, expected_price, new_price, winner_id) -> bool:
        updated = (
            self.db.query(Auction)
            .filter(
                Auction.id == auction_id,
                Auction.status == AUCTION_ACTIVE,
                Auction.current_price == expected_price,
            )
            .update(
                {Auction.current_price: new_price, Auction.current_winner_id: winner_id},
                synchronize_session=False,
            )
        )
        self._written()
        return updated == 1

    def complete_auction(self, auction_id: int) -> bool:
        updated = (
            self.db.query(Auction)
            .filter(Auction.id == auction_id, Auction.status == AUCTION_ACTIVE)
            .update({Auction.status: AUCTION_COMPLETED}, synchronize_session=False)
        )
        self._written()
        return updated == 1

    # --- bids ---
    def create_bid(self, auction_id, user_id, amount, timestamp) -> BidRecord:
        row = Bid(auction_id=auction_id, user_id=user_id, amount=amount, timestamp=timestamp)
        return _bid(self._add(row))

    def list_bids_by_auction(self, auction_id: int) -> list[BidRecord]:
        rows = self._q(Bid).filter(Bid.auction_id == auction_id).order_by(Bid.id.asc()).all()
        return [_bid(b) for b in rows]

    def list_bids_by_user(self, user_id: int) -> list[BidRecord]:
        rows = self._q(Bid).filter(Bid.user_id == user_id).order_by(Bid.id.asc()).all()
        return [_bid(b) for b in rows]

    # --- watchlist ---
    def list_watchlist(self, user_id: int) -> list[WatchlistRecord]:
        rows = self._q(WatchlistItem).filter(WatchlistItem.user_id == user_id).order_by(WatchlistItem.id.asc()).all()
        return [_watch(w) for w in rows]

    def add_to_watchlist(self, user_id: int, player_id: int) -> WatchlistRecord:
        existing = self._q(WatchlistItem).filter_by(user_id=user_id, player_id=player_id).first()
        if existing:
            return _watch(existing)
        return _watch(self._add(WatchlistItem(user_id=user_id, player_id=player_id)))

    def remove_from_watchlist(self, user_id: int, player_id: int) -> bool:
        deleted = (
            self.db.query(WatchlistItem)
            .filter_by(user_id=user_id, player_id=player_id)
            .delete(synchronize_session=False)
        )
        self._written()
        return deleted > 0
