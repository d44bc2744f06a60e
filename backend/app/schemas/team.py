from pydantic import BaseModel


class UserOut(BaseModel):
    id: int
    username: str
    team_name: str
    balance: float
    avatar_url: str | None = None
    is_admin: bool

    class Config:
        from_attributes = True


class TeamOut(UserOut):
    player_count: int
