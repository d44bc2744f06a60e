from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.players import PlayerOut
from app.schemas.team import UserOut


class AuctionOut(BaseModel):
    id: int
    player_id: int
    starting_price: float
    current_price: float
    current_winner_id: int | None = None
    start_time: datetime
    end_time: datetime
    status: str

    class Config:
        from_attributes = True


class BidOut(BaseModel):
    id: int
    auction_id: int
    user_id: int
    amount: float
    timestamp: datetime

    class Config:
        from_attributes = True


class AuctionWithPlayer(AuctionOut):
    player: PlayerOut
    is_live: bool
    has_ended: bool


class AuctionDetail(AuctionWithPlayer):
    bids: list[BidOut]


class AuctionHistoryItem(AuctionOut):
    player: PlayerOut
    winner: UserOut | None = None


class BidWithDetails(BidOut):
    auction: AuctionOut
    player: PlayerOut


class PlaceBidRequest(BaseModel):
    auction_id: int
    amount: Decimal = Field(gt=0)


class CreateAuctionRequest(BaseModel):
    player_id: int
    starting_price: Decimal = Field(gt=0)
    duration: float = Field(gt=0)  # horas


class EndAuctionRequest(BaseModel):
    auction_id: int


class AddFundsRequest(BaseModel):
    user_id: int
    amount: Decimal = Field(gt=0)
