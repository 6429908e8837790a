from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DecisionRequest(BaseModel):
    approve: bool
    note: Optional[str] = Field(default=None, max_length=300)
