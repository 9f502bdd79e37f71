"""Services package - Business logic layer"""

from services.participant_service import ParticipantService
from services.line_item_service import LineItemService
from services.settlement_service import SettlementService
from services.aggregation_service import AggregationService
from services.meal_service import MealService

__all__ = [
    "ParticipantService",
    "LineItemService",
    "SettlementService",
    "AggregationService",
    "MealService",
]
