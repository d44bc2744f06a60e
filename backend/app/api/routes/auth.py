from fastapi import APIRouter, Depends, HTTPException

from app.core.game_config import INITIAL_BALANCE
from app.core.security import create_access_token, hash_password, verify_password
from app.schemas.auth import LoginRequest, RegisterRequest
from app.schemas.team import UserOut
from app.storage import AuctionStore, get_store

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _token_response(user):
    token = create_access_token(
        {
            "sub": str(user.id),
            "is_admin": user.is_admin,
        }
    )
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }


@router.post("/register", status_code=201)
def register(data: RegisterRequest, store: AuctionStore = Depends(get_store)):
    if store.get_user_by_username(data.username):
        raise HTTPException(status_code=400, detail="Username already exists")

    user = store.create_user(
        username=data.username,
        password_hash=hash_password(data.password),
        team_name=data.team_name.strip(),
        balance=INITIAL_BALANCE,
        avatar_url=data.avatar_url,
    )
    return _token_response(user)


@router.post("/login")
def login(data: LoginRequest, store: AuctionStore = Depends(get_store)):
    user = store.get_user_by_username(data.username)

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")

    return _token_response(user)
