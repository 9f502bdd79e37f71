"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.participant_schemas import Participant, GuestCreate, RestaurantRef
from domain.schemas.meal_schemas import (
    LineItemInput,
    LineItem,
    MealRecord,
    MealCreate,
    MealUpdate,
    MealResponse,
)
from domain.schemas.settlement_schemas import (
    SettlementLine,
    MealAggregate,
    DaySettlementResponse,
    GroupStatisticsResponse,
)

__all__ = [
    # Participant schemas
    "Participant",
    "GuestCreate",
    "RestaurantRef",
    # Meal schemas
    "LineItemInput",
    "LineItem",
    "MealRecord",
    "MealCreate",
    "MealUpdate",
    "MealResponse",
    # Settlement schemas
    "SettlementLine",
    "MealAggregate",
    "DaySettlementResponse",
    "GroupStatisticsResponse",
]
