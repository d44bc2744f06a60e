import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import AuctionError

logger = logging.getLogger(__name__)


async def auction_error_handler(request: Request, exc: AuctionError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuctionError, auction_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
