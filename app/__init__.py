"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    ServiceValidationError,
    MealValidationError,
    UnknownParticipantError,
    NotFoundError,
    SettlementIntegrityError,
)

__all__ = [
    "settings",
    "ServiceValidationError",
    "MealValidationError",
    "UnknownParticipantError",
    "NotFoundError",
    "SettlementIntegrityError",
]
