from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional

class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    first_place_reward: int = Field(0, ge=0)
    second_place_reward: int = Field(0, ge=0)
    third_place_reward: int = Field(0, ge=0)

class TeamRewardsUpdate(BaseModel):
    first_place_reward: int = Field(..., ge=0)
    second_place_reward: int = Field(..., ge=0)
    third_place_reward: int = Field(..., ge=0)

class TeamResponse(BaseModel):
    id: int
    name: str
    owner_id: int
    first_place_reward: int
    second_place_reward: int
    third_place_reward: int
    created_at: Optional[datetime]
    my_role: Optional[str] = None  # owner / manager / employee for the caller

    model_config = {"from_attributes": True}

class MemberResponse(BaseModel):
    user_id: int
    full_name: str
    role: str
    joined_at: Optional[datetime]

class MemberRoleUpdate(BaseModel):
    role: Literal["employee", "manager"]
