from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from planets.models.player import PlayerRole


class PlayerResponse(BaseModel):
    id: int
    username: str
    email: str
    display_name: str
    avatar_url: Optional[str] = None
    role: PlayerRole
    created_at: datetime

    model_config = {"from_attributes": True}
