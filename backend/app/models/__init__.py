# Importa aquí los modelos para que SQLAlchemy los "vea" al crear tablas
from app.models.user import User  # noqa: F401
from app.models.players import Player  # noqa: F401
from app.models.auction import Auction, Bid  # noqa: F401
from app.models.watchlist import WatchlistItem  # noqa: F401
