from pydantic import BaseModel, ConfigDict
from typing import List, Optional
import uuid


class BotPublicInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: Optional[str] = None
    username: Optional[str] = None


class BotListOut(BaseModel):
    bots: List[BotPublicInfo]
