from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from domain.enums import ParticipantType


class Participant(BaseModel):
    """Someone who can owe money for a meal: a member, a regular, or a guest"""

    id: str = Field(..., min_length=1)
    name: str = ""
    type: ParticipantType = ParticipantType.MEMBER

    model_config = {"frozen": True}


class GuestCreate(BaseModel):
    """Schema for adding an ad hoc guest to a meal"""

    name: str = Field(..., description="Guest display name")


class RestaurantRef(BaseModel):
    """Reference to a restaurant in the group registry"""

    id: str = ""
    name: str = ""
    category: Optional[str] = None

    model_config = {"frozen": True}
