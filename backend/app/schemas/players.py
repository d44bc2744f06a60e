from pydantic import BaseModel, Field


class PlayerOut(BaseModel):
    id: int
    username: str
    real_name: str
    specialty: str
    level: int
    accuracy: int
    reaction_time: int
    strategy: int
    leadership: int | None = None
    team_coordination: int | None = None
    map_awareness: int | None = None
    survival_skills: int | None = None
    resource_management: int | None = None
    combat: int | None = None
    win_rate: int
    experience: int
    image_url: str | None = None
    rating: float
    owner_id: int | None = None
    is_active: bool
    base_price: float
    is_released: bool
    available_for_auction: bool

    class Config:
        from_attributes = True


class PlayerCreate(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    real_name: str = Field(min_length=2, max_length=50)
    specialty: str = Field(min_length=2)
    level: int = Field(ge=1, le=100)
    accuracy: int = Field(ge=1, le=100)
    reaction_time: int = Field(ge=1, le=100)
    strategy: int = Field(ge=1, le=100)
    leadership: int | None = Field(default=None, ge=1, le=100)
    team_coordination: int | None = Field(default=None, ge=1, le=100)
    map_awareness: int | None = Field(default=None, ge=1, le=100)
    survival_skills: int | None = Field(default=None, ge=1, le=100)
    resource_management: int | None = Field(default=None, ge=1, le=100)
    combat: int | None = Field(default=None, ge=1, le=100)
    win_rate: int = Field(ge=0, le=100)
    experience: int = Field(ge=0)
    rating: float = Field(ge=1, le=5)
    image_url: str | None = None
