from pydantic import BaseModel
from typing import List

class LeaderboardEntryResponse(BaseModel):
    user_id: int
    full_name: str
    total_reward: int
    rank: int
    bonus: int

    model_config = {"from_attributes": True}

class LeaderboardResponse(BaseModel):
    team_id: int
    first_place_reward: int
    second_place_reward: int
    third_place_reward: int
    entries: List[LeaderboardEntryResponse]

class ProgressResponse(BaseModel):
    user_id: int
    total_reward: int
    level: int
    within_level: int
    level_threshold: int
    to_next_level: int

    active_tasks: int
    pending_tasks: int
    completed_tasks: int
    rejected_tasks: int
    total_tasks: int
    success_rate: int  # percent of team tasks approved
