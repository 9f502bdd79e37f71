"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Generic, TypeVar, Optional, Type
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing primary-key access shared by all repositories.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_entity(self, entity_id: str) -> Optional[ModelType]:
        """
        Get the ORM entity by primary key.

        Args:
            entity_id: Entity primary key

        Returns:
            Entity or None if not found
        """
        return self.db.get(self.model, entity_id)

    def delete(self, entity_id: str) -> bool:
        """Delete entity by ID"""
        entity = self.get_entity(entity_id)
        if entity:
            self.db.delete(entity)
            self.db.commit()
            return True
        return False

    def exists(self, entity_id: str) -> bool:
        """Check if entity exists"""
        return self.get_entity(entity_id) is not None
