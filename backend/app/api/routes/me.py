from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.schemas.players import PlayerOut
from app.schemas.team import UserOut
from app.storage import AuctionStore, get_store
from app.storage.records import UserRecord

router = APIRouter(prefix="/api/v1", tags=["me"])


@router.get("/me", response_model=UserOut)
def me(user: UserRecord = Depends(get_current_user)):
    return user


@router.get("/teams/my-team", response_model=list[PlayerOut])
def my_team(user: UserRecord = Depends(get_current_user), store: AuctionStore = Depends(get_store)):
    return store.list_players_by_owner(user.id)
