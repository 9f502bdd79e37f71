"""
Meal document model.

Meals are stored as whole documents. Only the fields the repository filters
or sorts on are lifted into columns; everything else lives in ``payload``.
"""

from sqlalchemy import Column, Text, JSON, TIMESTAMP, Index

from domain.models.database import Base


class MealDocument(Base):
    """Stored meal record"""

    __tablename__ = "meal_record"

    meal_id = Column(Text, primary_key=True)
    group_id = Column(Text, nullable=False)
    date_key = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False)
    payload = Column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_meal_record_group_date", "group_id", "date_key"),
    )
