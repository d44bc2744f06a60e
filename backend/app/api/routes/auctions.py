from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.game_config import AUCTION_COMPLETED, AUCTION_STATUSES
from app.schemas.auction import AuctionDetail, AuctionHistoryItem, AuctionWithPlayer, BidOut
from app.schemas.players import PlayerOut
from app.schemas.team import UserOut
from app.services.auction_engine import has_ended, is_live, list_live_auctions
from app.storage import AuctionStore, get_store

router = APIRouter(prefix="/api/v1/auctions", tags=["auctions"])


def _with_player(store: AuctionStore, auction, now: datetime) -> Optional[AuctionWithPlayer]:
    player = store.get_player(auction.player_id)
    if player is None:
        return None
    return AuctionWithPlayer(
        **asdict(auction),
        player=PlayerOut.model_validate(player),
        is_live=is_live(auction, now),
        has_ended=has_ended(auction, now),
    )


@router.get("", response_model=list[AuctionWithPlayer])
def list_auctions(status: Optional[str] = None, store: AuctionStore = Depends(get_store)):
    if status and status not in AUCTION_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status. Allowed: {list(AUCTION_STATUSES)}")

    now = datetime.now(timezone.utc)
    items = (_with_player(store, a, now) for a in store.list_auctions(status))
    return [i for i in items if i is not None]


@router.get("/live", response_model=list[AuctionWithPlayer])
def live_auctions(store: AuctionStore = Depends(get_store)):
    now = datetime.now(timezone.utc)
    items = (_with_player(store, a, now) for a in list_live_auctions(store, now))
    return [i for i in items if i is not None]


@router.get("/history", response_model=list[AuctionHistoryItem])
def auction_history(store: AuctionStore = Depends(get_store)):
    history = []
    for auction in store.list_auctions(AUCTION_COMPLETED):
        player = store.get_player(auction.player_id)
        if player is None:
            continue
        winner = store.get_user(auction.current_winner_id) if auction.current_winner_id else None
        history.append(
            AuctionHistoryItem(
                **asdict(auction),
                player=PlayerOut.model_validate(player),
                winner=UserOut.model_validate(winner) if winner else None,
            )
        )
    return history


@router.get("/{auction_id}", response_model=AuctionDetail)
def get_auction(auction_id: int, store: AuctionStore = Depends(get_store)):
    auction = store.get_auction(auction_id)
    if not auction:
        raise HTTPException(status_code=404, detail="Auction not found")

    item = _with_player(store, auction, datetime.now(timezone.utc))
    if item is None:
        raise HTTPException(status_code=404, detail="Player not found")

    bids = [BidOut.model_validate(b) for b in store.list_bids_by_auction(auction_id)]
    return AuctionDetail(**item.model_dump(), bids=bids)
