"""
Meal Repository - Data access layer for meal documents
"""

from typing import Any, Dict, List, Mapping, Optional
from datetime import datetime, timezone
import logging

from sqlalchemy.orm import Session
from sqlalchemy import and_

from app.exceptions import ServiceValidationError
from repositories.base import BaseRepository
from domain.mappers import MealMapper
from domain.models import MealDocument
from domain.schemas.meal_schemas import MealRecord

logger = logging.getLogger("lunchsplit.repositories.meals")


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(timezone.utc)


class MealRepository(BaseRepository[MealDocument]):
    """
    Repository for meal documents.

    Stores and returns plain documents. Turning a document back into a
    MealRecord (and recomputing its settlement) is the meal service's job,
    so documents written by older revisions of the app remain readable.
    """

    def __init__(self, db: Session):
        super().__init__(db, MealDocument)

    def put(self, meal: MealRecord) -> Dict[str, Any]:
        """Insert or replace a meal; last write wins"""
        return self.put_document(MealMapper.to_document(meal))

    def put_document(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert or replace a raw document of any revision"""
        meal_id = document.get("id")
        group_id = document.get("group_id") or document.get("groupId")
        date_key = document.get("date_key") or document.get("dateKey")
        if not meal_id or not group_id or not date_key:
            raise ServiceValidationError(
                "Meal documents need id, group id and date key",
                details={"id": meal_id, "group_id": group_id, "date_key": date_key},
            )

        created_at = _as_datetime(document.get("created_at") or document.get("createdAt"))
        updated_at = _as_datetime(
            document.get("updated_at") or document.get("updatedAt") or created_at
        )

        entity = self.get_entity(meal_id)
        if entity is None:
            entity = MealDocument(meal_id=meal_id)
            self.db.add(entity)

        entity.group_id = group_id
        entity.date_key = date_key
        entity.created_at = created_at
        entity.updated_at = updated_at
        entity.payload = dict(document)

        self.db.commit()
        logger.debug(f"Stored meal {meal_id} for group {group_id} on {date_key}")
        return dict(entity.payload)

    def get_by_id(self, meal_id: str) -> Optional[Dict[str, Any]]:
        """Get meal document by ID"""
        entity = self.get_entity(meal_id)
        return dict(entity.payload) if entity else None

    def get_by_group_and_date(self, group_id: str, date_key: str) -> List[Dict[str, Any]]:
        """Meals of a group on one day, newest first"""
        entities = (
            self.db.query(MealDocument)
            .filter(
                and_(
                    MealDocument.group_id == group_id,
                    MealDocument.date_key == date_key,
                )
            )
            .order_by(MealDocument.created_at.desc())
            .all()
        )
        return [dict(e.payload) for e in entities]

    def get_by_group(self, group_id: str) -> List[Dict[str, Any]]:
        """Every meal of a group, newest first"""
        entities = (
            self.db.query(MealDocument)
            .filter(MealDocument.group_id == group_id)
            .order_by(MealDocument.date_key.desc(), MealDocument.created_at.desc())
            .all()
        )
        return [dict(e.payload) for e in entities]

    def get_by_group_and_date_range(
        self, group_id: str, start: str, end: str
    ) -> List[Dict[str, Any]]:
        """Meals of a group with start <= date_key <= end"""
        entities = (
            self.db.query(MealDocument)
            .filter(
                and_(
                    MealDocument.group_id == group_id,
                    MealDocument.date_key >= start,
                    MealDocument.date_key <= end,
                )
            )
            .order_by(MealDocument.date_key.desc(), MealDocument.created_at.desc())
            .all()
        )
        return [dict(e.payload) for e in entities]
