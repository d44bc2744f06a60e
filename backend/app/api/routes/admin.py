from fastapi import APIRouter, Depends, HTTPException

from app.core.security import require_admin
from app.schemas.auction import AddFundsRequest, AuctionOut, CreateAuctionRequest, EndAuctionRequest
from app.schemas.players import PlayerCreate, PlayerOut
from app.schemas.team import TeamOut, UserOut
from app.services import auction_engine
from app.storage import AuctionStore, get_store

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/teams", response_model=list[TeamOut])
def list_teams(admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    return [
        TeamOut(
            **UserOut.model_validate(u).model_dump(),
            player_count=store.count_players_by_owner(u.id),
        )
        for u in store.list_users()
        if not u.is_admin
    ]


@router.get("/teams/{team_id}/players", response_model=list[PlayerOut])
def team_players(team_id: int, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    if not store.get_user(team_id):
        raise HTTPException(status_code=404, detail="Team not found")
    return store.list_players_by_owner(team_id)


@router.post("/teams/add-funds")
def add_funds(req: AddFundsRequest, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    user = auction_engine.add_funds(store, req.user_id, req.amount)
    return {"ok": True, "message": "Funds added successfully", "user": UserOut.model_validate(user)}


@router.get("/players/released", response_model=list[PlayerOut])
def released_players(admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    return store.list_released_players()


@router.post("/players/create", response_model=PlayerOut, status_code=201)
def create_player(req: PlayerCreate, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    # Sin equipo y ya liberado: se puede subastar directamente
    return store.create_player(
        **req.model_dump(),
        owner_id=None,
        is_active=True,
        is_released=True,
        available_for_auction=True,
    )


@router.post("/players/{player_id}/force-release")
def force_release(player_id: int, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    player = auction_engine.release_player(store, player_id)
    return {
        "ok": True,
        "message": "Player released from team successfully",
        "player": PlayerOut.model_validate(player),
    }


@router.post("/auctions/create", response_model=AuctionOut, status_code=201)
def create_auction(req: CreateAuctionRequest, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    return auction_engine.create_auction(store, req.player_id, req.starting_price, req.duration)


@router.post("/auctions/end")
def end_auction(req: EndAuctionRequest, admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    auction = auction_engine.end_auction(store, req.auction_id)
    return {"ok": True, "message": "Auction ended successfully", "auction": AuctionOut.model_validate(auction)}


@router.post("/auctions/settle-expired")
def settle_expired(admin=Depends(require_admin), store: AuctionStore = Depends(get_store)):
    settled = auction_engine.settle_expired_auctions(store)
    return {
        "ok": True,
        "settled": [AuctionOut.model_validate(a) for a in settled],
        "count": len(settled),
    }
