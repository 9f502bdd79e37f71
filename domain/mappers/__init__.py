"""
Domain mappers package.
Handles transformation between stored documents and domain schemas.
"""

from domain.mappers.meal_mapper import MealMapper

__all__ = ["MealMapper"]
