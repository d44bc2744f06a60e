from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from app.core.config import settings
from app.core.errors import (
    AuctionError,
    BidConflict,
    ImpermissibleState,
    InsufficientFunds,
    InvalidBid,
    InvalidState,
    NotFound,
    TeamFull,
)
from app.core.game_config import AUCTION_ACTIVE, MAX_TEAM_SIZE
from app.storage.interface import AuctionStore
from app.storage.records import AuctionRecord, BidRecord, PlayerRecord, UserRecord

logger = logging.getLogger(__name__)


class _StaleAuction(Exception):
    """The auction moved between validation and write."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _money(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() para no arrastrar el error binario de los float
    return Decimal(str(value))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def has_ended(auction: AuctionRecord, now: Optional[datetime] = None) -> bool:
    return (now or _utcnow()) >= auction.end_time


def is_live(auction: AuctionRecord, now: Optional[datetime] = None) -> bool:
    return auction.status == AUCTION_ACTIVE and not has_ended(auction, now)


def list_live_auctions(store: AuctionStore, now: Optional[datetime] = None) -> list[AuctionRecord]:
    now = now or _utcnow()
    return [a for a in store.list_auctions(AUCTION_ACTIVE) if not has_ended(a, now)]


def minimum_next_bid(current_price: Decimal) -> Decimal:
    """
    Lowest amount that may be accepted on top of ``current_price``
    (bids must still be strictly greater than the current price).
    """
    pct = _money(settings.MIN_BID_INCREMENT_PCT)
    if pct <= 0:
        return current_price
    return (current_price * (1 + pct / 100)).quantize(Decimal("0.01"))


# ---------------------------------------------------------------------------
# Bids
# ---------------------------------------------------------------------------

def _check_bid(store: AuctionStore, auction: AuctionRecord, bidder_id: int, amount: Decimal, now: datetime):
    # El orden importa: el primer fallo es el que se devuelve
    if auction.status != AUCTION_ACTIVE:
        raise InvalidState("Auction is not active")

    if has_ended(auction, now):
        raise InvalidState("Auction has ended")

    if amount <= auction.current_price:
        raise InvalidBid("Bid must be higher than current price")

    floor = minimum_next_bid(auction.current_price)
    if amount < floor:
        raise InvalidBid(f"Bid must be at least {floor}")

    bidder = store.get_user(bidder_id)
    if bidder is None or bidder.balance < amount:
        raise InsufficientFunds()

    if store.count_players_by_owner(bidder_id) >= MAX_TEAM_SIZE:
        raise TeamFull(MAX_TEAM_SIZE)


def place_bid(
    store: AuctionStore,
    bidder_id: int,
    auction_id: int,
    amount,
    now: Optional[datetime] = None,
) -> BidRecord:
    """
    Validate and record a bid. The bidder's balance is only checked, never
    reserved: money moves when the auction is settled.

    The new price is written with a compare-and-swap on the price that was
    validated. If another bid (or the settlement) got there first, the whole
    check runs again against fresh data.
    """
    amount = _money(amount)

    for attempt in range(1, settings.BID_MAX_RETRIES + 1):
        when = now or _utcnow()
        auction = store.get_auction(auction_id)
        if auction is None:
            raise NotFound("Auction", auction_id)

        _check_bid(store, auction, bidder_id, amount, when)

        try:
            with store.transaction():
                if not store.swap_auction_lead(auction_id, auction.current_price, amount, bidder_id):
                    raise _StaleAuction()
                bid = store.create_bid(auction_id, bidder_id, amount, when)
        except _StaleAuction:
            logger.info(
                "Auction %s changed under bid of %s by user %s (attempt %d), retrying",
                auction_id, amount, bidder_id, attempt,
            )
            continue

        logger.info("Bid %s accepted: user %s -> auction %s at %s", bid.id, bidder_id, auction_id, amount)
        return bid

    logger.warning("Giving up bid on auction %s after %d attempts", auction_id, settings.BID_MAX_RETRIES)
    raise BidConflict(auction_id)


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------

def _transfer_to_winner(store: AuctionStore, auction: AuctionRecord) -> bool:
    """
    Hand the player to the leading bidder and charge the final price.

    Returns False (and leaves player and balance as they were) when the winner
    can no longer take the player: user gone, roster full, balance short since
    the bid was placed, or the player already has an owner.
    """
    winner_id = auction.current_winner_id
    price = auction.current_price

    winner = store.get_user(winner_id)
    if winner is None:
        logger.warning("Auction %s: winner %s no longer exists, no transfer", auction.id, winner_id)
        return False

    if store.count_players_by_owner(winner_id) >= MAX_TEAM_SIZE:
        logger.warning("Auction %s: winner %s has a full roster, no transfer", auction.id, winner_id)
        return False

    player = store.get_player(auction.player_id)
    if player is None:
        raise NotFound("Player", auction.player_id)

    # Asignación condicional: solo si sigue sin dueño, y antes de cobrar nada
    if not store.claim_player(auction.player_id, winner_id):
        logger.warning("Auction %s: player %s already has an owner, no transfer", auction.id, auction.player_id)
        return False

    # Débito condicional: nunca deja el saldo en negativo
    if not store.debit_balance(winner_id, price):
        store.update_player(
            auction.player_id,
            owner_id=None,
            is_released=player.is_released,
            available_for_auction=player.available_for_auction,
        )
        logger.warning(
            "Auction %s: winner %s cannot cover %s (balance %s), no transfer",
            auction.id, winner_id, price, winner.balance,
        )
        return False

    return True


def end_auction(store: AuctionStore, auction_id: int) -> AuctionRecord:
    """
    Close an active auction and settle it.

    Status, player owner and winner balance change together or not at all.
    Only one caller can flip an auction to completed, so a repeated or
    concurrent call gets InvalidState and never charges twice.
    """
    auction = store.get_auction(auction_id)
    if auction is None:
        raise NotFound("Auction", auction_id)
    if auction.status != AUCTION_ACTIVE:
        raise InvalidState("Auction is not active")

    with store.transaction():
        if not store.complete_auction(auction_id):
            raise InvalidState("Auction is not active")

        # Releer: una vez completada ya no entran más pujas
        settled = store.get_auction(auction_id)
        transferred = False
        if settled.current_winner_id is not None:
            transferred = _transfer_to_winner(store, settled)

    if transferred:
        logger.info(
            "Auction %s settled: player %s -> user %s for %s",
            auction_id, settled.player_id, settled.current_winner_id, settled.current_price,
        )
    else:
        logger.info("Auction %s completed without transfer", auction_id)

    return store.get_auction(auction_id)


def settle_expired_auctions(store: AuctionStore, now: Optional[datetime] = None) -> list[AuctionRecord]:
    """
    End every active auction whose end time has passed.

    Meant to be called by a scheduler or an admin request; nothing in the app
    runs it on a timer.
    """
    now = now or _utcnow()
    settled = []
    for auction in store.list_auctions(AUCTION_ACTIVE):
        if not has_ended(auction, now):
            continue
        try:
            settled.append(end_auction(store, auction.id))
        except InvalidState:
            # otro proceso la cerró entre medias
            logger.info("Auction %s already settled elsewhere", auction.id)
        except AuctionError as exc:
            # la transacción se deshizo; la subasta sigue activa para el siguiente pase
            logger.error("Could not settle auction %s: %s", auction.id, exc.detail)
    return settled


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------

def create_auction(
    store: AuctionStore,
    player_id: int,
    starting_price,
    duration_hours: float,
    now: Optional[datetime] = None,
) -> AuctionRecord:
    starting_price = _money(starting_price)
    start = now or _utcnow()

    # Comprobaciones y alta en la misma transacción: en memoria las serializa
    # el lock, en SQL el índice único parcial de subastas activas
    with store.transaction():
        player = store.get_player(player_id)
        if player is None:
            raise NotFound("Player", player_id)

        if starting_price <= 0 or duration_hours <= 0:
            raise InvalidState("Starting price and duration must be positive")

        if player.owner_id is not None:
            raise ImpermissibleState("Player is not available for auction")

        if any(a.status == AUCTION_ACTIVE for a in store.list_auctions_for_player(player_id)):
            raise ImpermissibleState("Player is already in an active auction")

        end = start + timedelta(hours=duration_hours)
        store.update_player(player_id, available_for_auction=True)
        auction = store.create_auction(player_id, starting_price, start, end)

    logger.info("Auction %s created for player %s, starts at %s, ends %s", auction.id, player_id, starting_price, end)
    return auction


def release_player(store: AuctionStore, player_id: int) -> PlayerRecord:
    """Free agent again; putting them up for auction is a separate step."""
    player = store.update_player(player_id, owner_id=None, is_released=True)
    if player is None:
        raise NotFound("Player", player_id)
    logger.info("Player %s released", player_id)
    return player


def add_funds(store: AuctionStore, user_id: int, amount) -> UserRecord:
    amount = _money(amount)
    if amount <= 0:
        raise InvalidState("Amount must be positive")

    user = store.credit_balance(user_id, amount)
    if user is None:
        raise NotFound("User", user_id)
    logger.info("Added %s to user %s (balance %s)", amount, user_id, user.balance)
    return user
