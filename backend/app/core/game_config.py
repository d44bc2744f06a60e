from decimal import Decimal

MAX_TEAM_SIZE = 5
INITIAL_BALANCE = Decimal("25000")
DEFAULT_BASE_PRICE = Decimal("5000")

AUCTION_ACTIVE = "active"
AUCTION_COMPLETED = "completed"
AUCTION_CANCELLED = "cancelled"
AUCTION_STATUSES = (AUCTION_ACTIVE, AUCTION_COMPLETED, AUCTION_CANCELLED)
