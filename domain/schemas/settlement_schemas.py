from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.enums import ParticipantType


class SettlementLine(BaseModel):
    """What one participant owes, resolved for display"""

    participant_id: str
    name: str
    type: Optional[ParticipantType] = None
    amount: int
    formatted: str


class MealAggregate(BaseModel):
    """Totals over a collection of meals"""

    per_participant_total: Dict[str, int] = Field(default_factory=dict)
    per_meal_total: Dict[str, int] = Field(default_factory=dict)
    grand_total: int = 0


class DaySettlementResponse(BaseModel):
    """Settlement of every meal a group had on one day"""

    group_id: str
    date_key: str
    meal_count: int
    grand_total: int
    per_meal_total: Dict[str, int]
    settlement: List[SettlementLine]


class GroupStatisticsResponse(BaseModel):
    """Historical statistics for a group over an optional date range"""

    group_id: str
    start: Optional[str] = None
    end: Optional[str] = None
    total_amount: int
    meal_count: int
    average_per_meal: int
    participant_count: int
    settlement: List[SettlementLine]
    daily_totals: Dict[str, int]
