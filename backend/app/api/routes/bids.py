from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.schemas.auction import AuctionOut, BidOut, BidWithDetails, PlaceBidRequest
from app.schemas.players import PlayerOut
from app.services import auction_engine
from app.storage import AuctionStore, get_store
from app.storage.records import UserRecord

router = APIRouter(prefix="/api/v1/bids", tags=["bids"])


@router.post("", response_model=BidOut, status_code=201)
def place_bid(
    req: PlaceBidRequest,
    user: UserRecord = Depends(get_current_user),
    store: AuctionStore = Depends(get_store),
):
    return auction_engine.place_bid(store, user.id, req.auction_id, req.amount)


@router.get("/my-bids", response_model=list[BidWithDetails])
def my_bids(user: UserRecord = Depends(get_current_user), store: AuctionStore = Depends(get_store)):
    out = []
    for bid in store.list_bids_by_user(user.id):
        auction = store.get_auction(bid.auction_id)
        if not auction:
            continue
        player = store.get_player(auction.player_id)
        if not player:
            continue
        out.append(
            BidWithDetails(
                **asdict(bid),
                auction=AuctionOut.model_validate(auction),
                player=PlayerOut.model_validate(player),
            )
        )
    return out
