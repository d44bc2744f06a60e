import logging

from fastapi import FastAPI

from app.core.config import settings
from app.db.init_db import init_db
from app.api.errors import register_error_handlers
from app.api.routes.auth import router as auth_router
from app.api.routes.me import router as me_router
from app.api.routes.players import router as players_router
from app.api.routes.auctions import router as auctions_router
from app.api.routes.bids import router as bids_router
from app.api.routes.watchlist import router as watchlist_router
from app.api.routes.stats import router as stats_router
from app.api.routes.admin import router as admin_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="GameDraft Auction")
register_error_handlers(app)

app.include_router(auth_router)
app.include_router(me_router)
app.include_router(players_router)
app.include_router(auctions_router)
app.include_router(bids_router)
app.include_router(watchlist_router)
app.include_router(stats_router)
app.include_router(admin_router)


@app.on_event("startup")
def on_startup():
    if settings.STORAGE_BACKEND.strip().lower() == "sql":
        init_db()


@app.get("/health")
def health():
    return {"ok": True, "storage": settings.STORAGE_BACKEND}
