from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.core.errors import NotFound
from app.core.game_config import AUCTION_ACTIVE, AUCTION_COMPLETED, MAX_TEAM_SIZE
from app.storage.interface import AuctionStore


@dataclass
class DashboardStats:
    balance: Decimal
    team_current: int
    team_max: int
    active_bids: int
    performance: float  # % de subastas ganadas entre las terminadas en las que pujó


def compute_dashboard_stats(store: AuctionStore, user_id: int) -> DashboardStats:
    user = store.get_user(user_id)
    if user is None:
        raise NotFound("User", user_id)

    bids = store.list_bids_by_user(user_id)

    active_bids = 0
    completed = 0
    won = 0
    # La tasa de victorias se calcula por puja, no por subasta,
    # así que varias pujas en la misma subasta pesan varias veces
    auctions = {}
    for bid in bids:
        if bid.auction_id not in auctions:
            auctions[bid.auction_id] = store.get_auction(bid.auction_id)
        auction = auctions[bid.auction_id]
        if auction is None:
            continue
        if auction.status == AUCTION_ACTIVE:
            active_bids += 1
        elif auction.status == AUCTION_COMPLETED:
            completed += 1
            if auction.current_winner_id == user_id:
                won += 1

    win_rate = (won / completed) * 100 if completed else 0.0

    return DashboardStats(
        balance=user.balance,
        team_current=store.count_players_by_owner(user_id),
        team_max=MAX_TEAM_SIZE,
        active_bids=active_bids,
        performance=round(win_rate, 1),
    )
