from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from domain.enums import ItemType
from domain.schemas.participant_schemas import Participant, RestaurantRef
from domain.schemas.settlement_schemas import SettlementLine


class LineItemInput(BaseModel):
    """Raw line item as submitted by the meal form.

    Nothing here is trusted; LineItemService.build_item turns it into a
    LineItem or raises MealValidationError.
    """

    id: Optional[str] = Field(
        None, description="Existing item id when editing; omitted for new items"
    )
    name: str = ""
    price: Any = None
    type: str = ItemType.INDIVIDUAL.value
    member_id: Optional[str] = Field(
        None, description="Consumer of an individual item"
    )
    participant_ids: List[str] = Field(
        default_factory=list, description="Consumers of a shared item"
    )


class LineItem(BaseModel):
    """Validated, normalized line item"""

    id: str
    name: str
    price: int = Field(..., gt=0)
    type: ItemType
    consumer_ids: Tuple[str, ...]
    split_amount: Optional[int] = None

    model_config = {"frozen": True}

    @property
    def member_id(self) -> Optional[str]:
        """Sole consumer of an individual item"""
        if self.type == ItemType.INDIVIDUAL and self.consumer_ids:
            return self.consumer_ids[0]
        return None

    def to_input(self) -> LineItemInput:
        if self.type == ItemType.INDIVIDUAL:
            return LineItemInput(
                id=self.id,
                name=self.name,
                price=self.price,
                type=self.type.value,
                member_id=self.member_id,
            )
        return LineItemInput(
            id=self.id,
            name=self.name,
            price=self.price,
            type=self.type.value,
            participant_ids=list(self.consumer_ids),
        )


class MealRecord(BaseModel):
    """One eating event with its derived settlement.

    Instances are immutable; the lifecycle manager returns a new record for
    every change.
    """

    id: str
    group_id: str
    date_key: str
    restaurant: RestaurantRef
    items: Tuple[LineItem, ...]
    participants: Tuple[Participant, ...]
    memo: str = ""
    settlement: Dict[str, int]
    total_amount: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}

    @property
    def participant_ids(self) -> List[str]:
        return [p.id for p in self.participants]


class MealCreate(BaseModel):
    """Schema for recording a new meal"""

    date_key: str = Field(..., description="Meal date, YYYY-MM-DD")
    restaurant: Optional[RestaurantRef] = None
    items: List[LineItemInput] = Field(default_factory=list)
    participants: List[Participant] = Field(default_factory=list)
    memo: str = ""
    actor_id: Optional[str] = Field(
        None, description="User recording the meal"
    )


class MealUpdate(BaseModel):
    """Schema for editing a meal; omitted fields are left unchanged"""

    restaurant: Optional[RestaurantRef] = None
    items: Optional[List[LineItemInput]] = None
    participants: Optional[List[Participant]] = None
    memo: Optional[str] = None

    def touches_settlement(self) -> bool:
        return self.items is not None or self.participants is not None


class MealResponse(BaseModel):
    """Meal record with display-ready settlement lines"""

    meal: MealRecord
    settlement_lines: List[SettlementLine]
    rounding_discrepancy: int = 0
