"""
API dependencies for dependency injection
"""

from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session
from domain.models import get_db_session
from repositories import MealRepository


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def get_meal_repository(db: Session = Depends(get_db)) -> MealRepository:
    """Meal repository bound to the request's session"""
    return MealRepository(db)
