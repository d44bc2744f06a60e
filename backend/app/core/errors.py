"""
Typed failures raised by the auction engine.

Every error carries the HTTP status the API layer answers with, so routes
don't need to translate them one by one (see app/api/errors.py).
"""


class AuctionError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(AuctionError):
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidState(AuctionError):
    pass


class InvalidBid(AuctionError):
    pass


class InsufficientFunds(AuctionError):
    def __init__(self, detail: str = "Insufficient balance"):
        super().__init__(detail)


class TeamFull(AuctionError):
    def __init__(self, max_size: int):
        super().__init__(f"Your team is full (max {max_size} players)")
        self.max_size = max_size


class ImpermissibleState(AuctionError):
    pass


class BidConflict(AuctionError):
    status_code = 409

    def __init__(self, auction_id):
        super().__init__("Auction is receiving too many bids, try again")
        self.auction_id = auction_id
