from fastapi import APIRouter, Depends, HTTPException

from app.core.security import get_current_user
from app.schemas.players import PlayerOut
from app.services import auction_engine
from app.storage import AuctionStore, get_store
from app.storage.records import UserRecord

router = APIRouter(prefix="/api/v1/players", tags=["players"])


@router.get("", response_model=list[PlayerOut])
def list_players(store: AuctionStore = Depends(get_store)):
    return store.list_players()


@router.get("/{player_id}", response_model=PlayerOut)
def get_player(player_id: int, store: AuctionStore = Depends(get_store)):
    player = store.get_player(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player


@router.post("/{player_id}/release", response_model=PlayerOut)
def release_own_player(
    player_id: int,
    user: UserRecord = Depends(get_current_user),
    store: AuctionStore = Depends(get_store),
):
    player = store.get_player(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    # El motor no comprueba propiedad: eso es cosa de esta capa
    if player.owner_id != user.id:
        raise HTTPException(status_code=403, detail="You don't own this player")

    return auction_engine.release_player(store, player_id)
