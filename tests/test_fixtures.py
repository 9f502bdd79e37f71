"""
Shared test fixtures and utilities for the LunchSplit test suite.

This module contains participant and item builders, a realistic lunch
scenario, an in-memory database session and an API test client that are
reused across multiple test files.
"""

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from domain.enums import ParticipantType
from domain.models import Base, MealDocument  # noqa: F401  (registers the table)
from domain.schemas.participant_schemas import Participant, RestaurantRef
from repositories import MealRepository


FIXED_NOW = datetime(2025, 3, 14, 12, 30, tzinfo=timezone.utc)

# Realistic lunch crew: two app members, one regular without an account
REALISTIC_PARTICIPANTS = {
    "A": {"name": "김민수", "type": ParticipantType.MEMBER},
    "B": {"name": "이지은", "type": ParticipantType.MEMBER},
    "C": {"name": "박서준", "type": ParticipantType.REGULAR},
}


def make_participant(participant_id="A", name=None, participant_type=None):
    """
    Create a Participant with realistic defaults.

    Example:
        >>> make_participant("B").name
        '이지은'
    """
    profile = REALISTIC_PARTICIPANTS.get(
        participant_id, {"name": f"참여자 {participant_id}", "type": ParticipantType.MEMBER}
    )
    return Participant(
        id=participant_id,
        name=name if name is not None else profile["name"],
        type=participant_type or profile["type"],
    )


def make_roster(*participant_ids):
    return [make_participant(pid) for pid in (participant_ids or ("A", "B", "C"))]


def make_restaurant(restaurant_id="rest-1", name="홍콩반점", category="중식"):
    return RestaurantRef(id=restaurant_id, name=name, category=category)


def individual(name="김치찌개", price=8000, member_id="A", item_id=None):
    """Raw individual item as the meal form submits it"""
    data = {"name": name, "price": price, "type": "individual", "member_id": member_id}
    if item_id:
        data["id"] = item_id
    return data


def shared(name="탕수육", price=30000, participant_ids=("A", "B", "C"), item_id=None):
    """Raw shared item as the meal form submits it"""
    data = {
        "name": name,
        "price": price,
        "type": "shared",
        "participant_ids": list(participant_ids),
    }
    if item_id:
        data["id"] = item_id
    return data


def meal_payload(date_key="2025-03-14", items=None, participants=None, **overrides):
    """JSON body for POST /groups/{group_id}/meals"""
    payload = {
        "date_key": date_key,
        "restaurant": {"id": "rest-1", "name": "홍콩반점", "category": "중식"},
        "items": items if items is not None else [individual(), shared()],
        "participants": participants
        if participants is not None
        else [p.model_dump(mode="json") for p in make_roster()],
        "memo": "금요일 점심",
        "actor_id": "A",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# DATABASE SESSION FIXTURE FOR INTEGRATION TESTS
# =============================================================================


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create an isolated in-memory SQLite session.

    Every test gets a fresh database; StaticPool keeps the single in-memory
    connection alive across the threads TestClient uses.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def meal_repo(db_session: Session) -> MealRepository:
    return MealRepository(db_session)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """API client whose requests share the test's database session"""
    from api.dependencies import get_db
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
