"""
The storage contract the auction engine is written against.

Two implementations ship with the app (MemoryStore and SqlStore) and one of
them is picked at startup from settings.STORAGE_BACKEND.

Besides plain create/get/update, a store offers a few conditional writes.
They are the only way the engine mutates contended fields:

- swap_auction_lead: new price/leader only if the stored price is still the
  one the caller validated and the auction is still active;
- complete_auction: active -> completed, at most once;
- debit_balance: decrement only if the balance covers the amount;
- claim_player: set the owner only if the player has none.

Each returns False instead of writing when its condition doesn't hold.
create_auction raises ImpermissibleState if the player already has an active
auction.

Writes issued inside ``with store.transaction():`` are applied all together
or not at all.
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from app.storage.records import (
    AuctionRecord,
    BidRecord,
    PlayerRecord,
    UserRecord,
    WatchlistRecord,
)


class AuctionStore(Protocol):
    def transaction(self) -> AbstractContextManager[None]: ...

    # --- users ---
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...
    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...
    def create_user(
        self,
        username: str,
        password_hash: str,
        team_name: str,
        balance: Decimal,
        is_admin: bool = False,
        avatar_url: Optional[str] = None,
    ) -> UserRecord: ...
    def list_users(self) -> list[UserRecord]: ...
    def set_admin(self, user_id: int, is_admin: bool) -> Optional[UserRecord]: ...
    def credit_balance(self, user_id: int, amount: Decimal) -> Optional[UserRecord]: ...
    def debit_balance(self, user_id: int, amount: Decimal) -> bool: ...

    # --- players ---
    def get_player(self, player_id: int) -> Optional[PlayerRecord]: ...
    def list_players(self) -> list[PlayerRecord]: ...
    def list_players_by_owner(self, owner_id: int) -> list[PlayerRecord]: ...
    def count_players_by_owner(self, owner_id: int) -> int: ...
    def list_released_players(self) -> list[PlayerRecord]: ...
    def create_player(self, **fields) -> PlayerRecord: ...
    def update_player(self, player_id: int, **fields) -> Optional[PlayerRecord]: ...
    def claim_player(self, player_id: int, owner_id: int) -> bool: ...

    # --- auctions ---
    def get_auction(self, auction_id: int) -> Optional[AuctionRecord]: ...
    def list_auctions(self, status: Optional[str] = None) -> list[AuctionRecord]: ...
    def list_auctions_for_player(self, player_id: int) -> list[AuctionRecord]: ...
    def create_auction(
        self,
        player_id: int,
        starting_price: Decimal,
        start_time: datetime,
        end_time: datetime,
    ) -> AuctionRecord: ...
    def swap_auction_lead(
        self,
        auction_id: int,
        expected_price: Decimal,
        new_price: Decimal,
        winner_id: int,
    ) -> bool: ...
    def complete_auction(self, auction_id: int) -> bool: ...

    # --- bids ---
    def create_bid(
        self, auction_id: int, user_id: int, amount: Decimal, timestamp: datetime
    ) -> BidRecord: ...
    def list_bids_by_auction(self, auction_id: int) -> list[BidRecord]: ...
    def list_bids_by_user(self, user_id: int) -> list[BidRecord]: ...

    # --- watchlist ---
    def list_watchlist(self, user_id: int) -> list[WatchlistRecord]: ...
    def add_to_watchlist(self, user_id: int, player_id: int) -> WatchlistRecord: ...
    def remove_from_watchlist(self, user_id: int, player_id: int) -> bool: ...
