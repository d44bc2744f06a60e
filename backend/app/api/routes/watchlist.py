from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from app.core.security import get_current_user
from app.schemas.players import PlayerOut
from app.schemas.watchlist import WatchlistAddRequest, WatchlistOut, WatchlistWithPlayer
from app.storage import AuctionStore, get_store
from app.storage.records import UserRecord

router = APIRouter(prefix="/api/v1/watchlist", tags=["watchlist"])


@router.get("", response_model=list[WatchlistWithPlayer])
def get_watchlist(user: UserRecord = Depends(get_current_user), store: AuctionStore = Depends(get_store)):
    out = []
    for item in store.list_watchlist(user.id):
        player = store.get_player(item.player_id)
        if player:
            out.append(WatchlistWithPlayer(**asdict(item), player=PlayerOut.model_validate(player)))
    return out


@router.post("", response_model=WatchlistOut, status_code=201)
def add_to_watchlist(
    req: WatchlistAddRequest,
    user: UserRecord = Depends(get_current_user),
    store: AuctionStore = Depends(get_store),
):
    if not store.get_player(req.player_id):
        raise HTTPException(status_code=404, detail="Player not found")
    return store.add_to_watchlist(user.id, req.player_id)


@router.delete("/{player_id}")
def remove_from_watchlist(
    player_id: int,
    user: UserRecord = Depends(get_current_user),
    store: AuctionStore = Depends(get_store),
):
    if not store.remove_from_watchlist(user.id, player_id):
        raise HTTPException(status_code=404, detail="Watchlist item not found")
    return {"ok": True, "message": "Removed from watchlist"}
