from pydantic import BaseModel

from app.schemas.players import PlayerOut


class WatchlistAddRequest(BaseModel):
    player_id: int


class WatchlistOut(BaseModel):
    id: int
    user_id: int
    player_id: int

    class Config:
        from_attributes = True


class WatchlistWithPlayer(WatchlistOut):
    player: PlayerOut
