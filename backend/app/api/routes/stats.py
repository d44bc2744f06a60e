from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.services.dashboard import compute_dashboard_stats
from app.storage import AuctionStore, get_store
from app.storage.records import UserRecord

router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


@router.get("/dashboard")
def dashboard(user: UserRecord = Depends(get_current_user), store: AuctionStore = Depends(get_store)):
    st = compute_dashboard_stats(store, user.id)
    return {
        "balance": float(st.balance),
        "team_players": {
            "current": st.team_current,
            "max": st.team_max,
        },
        "active_bids": st.active_bids,
        "performance": st.performance,
    }
