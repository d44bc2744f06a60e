"""
Process-local store backed by dicts.

Handy for tests and for running the app without a database. All access goes
through one re-entrant lock; a transaction holds that lock from start to end
and keeps an undo journal so a failed block leaves nothing behind.
"""
from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from app.core.errors import ImpermissibleState
from app.core.game_config import AUCTION_ACTIVE, AUCTION_COMPLETED
from app.storage.records import (
    AuctionRecord,
    BidRecord,
    PlayerRecord,
    UserRecord,
    WatchlistRecord,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class MemoryStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self._journal: list[tuple[dict, int, object]] = []

        self._users: dict[int, UserRecord] = {}
        self._players: dict[int, PlayerRecord] = {}
        self._auctions: dict[int, AuctionRecord] = {}
        self._bids: dict[int, BidRecord] = {}
        self._watchlist: dict[int, WatchlistRecord] = {}

        self._ids = {
            "users": itertools.count(1),
            "players": itertools.count(1),
            "auctions": itertools.count(1),
            "bids": itertools.count(1),
            "watchlist": itertools.count(1),
        }

    @contextmanager
    def transaction(self):
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._journal = []
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    self._rollback()
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self._journal = []

    def _rollback(self):
        logger.debug("Rolling back %d in-memory write(s)", len(self._journal))
        for table, key, previous in reversed(self._journal):
            if previous is _MISSING:
                table.pop(key, None)
            else:
                table[key] = previous

    def _put(self, table: dict, key: int, record):
        if self._depth:
            self._journal.append((table, key, table.get(key, _MISSING)))
        table[key] = record
        return record

    def _delete(self, table: dict, key: int):
        if self._depth:
            self._journal.append((table, key, table.get(key, _MISSING)))
        del table[key]

    # --- users ---
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        wanted = username.strip().lower()
        with self._lock:
            return next((u for u in self._users.values() if u.username == wanted), None)

    def create_user(self, username, password_hash, team_name, balance, is_admin=False, avatar_url=None):
        with self._lock:
            user = UserRecord(
                id=next(self._ids["users"]),
                username=username.strip().lower(),
                password_hash=password_hash,
                team_name=team_name,
                balance=Decimal(balance),
                avatar_url=avatar_url,
                is_admin=is_admin,
                created_at=datetime.now(timezone.utc),
            )
            return self._put(self._users, user.id, user)

    def list_users(self) -> list[UserRecord]:
        with self._lock:
            return sorted(self._users.values(), key=lambda u: u.id)

    def set_admin(self, user_id: int, is_admin: bool) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            return self._put(self._users, user_id, replace(user, is_admin=is_admin))

    def credit_balance(self, user_id: int, amount: Decimal) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            return self._put(self._users, user_id, replace(user, balance=user.balance + amount))

    def debit_balance(self, user_id: int, amount: Decimal) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or user.balance < amount:
                return False
            self._put(self._users, user_id, replace(user, balance=user.balance - amount))
            return True

    # --- players ---
    def get_player(self, player_id: int) -> Optional[PlayerRecord]:
        with self._lock:
            return self._players.get(player_id)

    def list_players(self) -> list[PlayerRecord]:
        with self._lock:
            return sorted(self._players.values(), key=lambda p: p.id)

    def list_players_by_owner(self, owner_id: int) -> list[PlayerRecord]:
        return [p for p in self.list_players() if p.owner_id == owner_id]

    def count_players_by_owner(self, owner_id: int) -> int:
        return len(self.list_players_by_owner(owner_id))

    def list_released_players(self) -> list[PlayerRecord]:
        return [p for p in self.list_players() if p.is_released]

    def create_player(self, **fields) -> PlayerRecord:
        with self._lock:
            player = PlayerRecord(id=next(self._ids["players"]), **fields)
            return self._put(self._players, player.id, player)

    def update_player(self, player_id: int, **fields) -> Optional[PlayerRecord]:
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            return self._put(self._players, player_id, replace(player, **fields))

    def claim_player(self, player_id: int, owner_id: int) -> bool:
        with self._lock:
            player = self._players.get(player_id)
            if player is None or player.owner_id is not None:
                return False
            self._put(
                self._players,
                player_id,
                replace(player, owner_id=owner_id, is_released=False, available_for_auction=False),
            )
            return True

    # --- auctions ---
    def get_auction(self, auction_id: int) -> Optional[AuctionRecord]:
        with self._lock:
            return self._auctions.get(auction_id)

    def list_auctions(self, status: Optional[str] = None) -> list[AuctionRecord]:
        with self._lock:
            rows = sorted(self._auctions.values(), key=lambda a: a.id)
        if status:
            rows = [a for a in rows if a.status == status]
        return rows

    def list_auctions_for_player(self, player_id: int) -> list[AuctionRecord]:
        return [a for a in self.list_auctions() if a.player_id == player_id]

    def create_auction(self, player_id, starting_price, start_time, end_time) -> AuctionRecord:
        with self._lock:
            if any(a.player_id == player_id and a.status == AUCTION_ACTIVE for a in self._auctions.values()):
                raise ImpermissibleState("Player is already in an active auction")
            auction = AuctionRecord(
                id=next(self._ids["auctions"]),
                player_id=player_id,
                starting_price=starting_price,
                current_price=starting_price,
                current_winner_id=None,
                start_time=start_time,
                end_time=end_time,
                status=AUCTION_ACTIVE,
            )
            return self._put(self._auctions, auction.id, auction)

    def swap_auction_lead(self, auction_id, expected_price, new_price, winner_id) -> bool:
        with self._lock:
            auction = self._auctions.get(auction_id)
            if auction is None or auction.status != AUCTION_ACTIVE:
                return False
            if auction.current_price != expected_price:
                return False
            self._put(
                self._auctions,
                auction_id,
                replace(auction, current_price=new_price, current_winner_id=winner_id),
            )
            return True

    def complete_auction(self, auction_id: int) -> bool:
        with self._lock:
            auction = self._auctions.get(auction_id)
            if auction is None or auction.status != AUCTION_ACTIVE:
                return False
            self._put(self._auctions, auction_id, replace(auction, status=AUCTION_COMPLETED))
            return True

    # --- bids ---
    def create_bid(self, auction_id, user_id, amount, timestamp) -> BidRecord:
        with self._lock:
            bid = BidRecord(
                id=next(self._ids["bids"]),
                auction_id=auction_id,
                user_id=user_id,
                amount=amount,
                timestamp=timestamp,
            )
            return self._put(self._bids, bid.id, bid)

    def list_bids_by_auction(self, auction_id: int) -> list[BidRecord]:
        with self._lock:
            return sorted((b for b in self._bids.values() if b.auction_id == auction_id), key=lambda b: b.id)

    def list_bids_by_user(self, user_id: int) -> list[BidRecord]:
        with self._lock:
            return sorted((b for b in self._bids.values() if b.user_id == user_id), key=lambda b: b.id)

    # --- watchlist ---
    def list_watchlist(self, user_id: int) -> list[WatchlistRecord]:
        with self._lock:
            return sorted((w for w in self._watchlist.values() if w.user_id == user_id), key=lambda w: w.id)

    def add_to_watchlist(self, user_id: int, player_id: int) -> WatchlistRecord:
        with self._lock:
            for item in self._watchlist.values():
                if item.user_id == user_id and item.player_id == player_id:
                    return item
            item = WatchlistRecord(id=next(self._ids["watchlist"]), user_id=user_id, player_id=player_id)
            return self._put(self._watchlist, item.id, item)

    def remove_from_watchlist(self, user_id: int, player_id: int) -> bool:
        with self._lock:
            for item in list(self._watchlist.values()):
                if item.user_id == user_id and item.player_id == player_id:
                    self._delete(self._watchlist, item.id)
                    return True
            return False
