"""Meal recording and settlement routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
import logging

from api.dependencies import get_meal_repository
from domain.schemas.meal_schemas import MealCreate, MealResponse, MealUpdate
from domain.schemas.participant_schemas import GuestCreate, Participant
from domain.schemas.settlement_schemas import (
    DaySettlementResponse,
    GroupStatisticsResponse,
)
from repositories import MealRepository
from services import MealService, ParticipantService

router = APIRouter(tags=["Meals"])
logger = logging.getLogger("lunchsplit.api.meals")


@router.post(
    "/groups/{group_id}/meals",
    response_model=MealResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_meal(
    group_id: str,
    meal_data: MealCreate,
    repo: MealRepository = Depends(get_meal_repository),
):
    """
    Record a meal for a group.

    Items, roster and restaurant are validated together; on any failure the
    response is 400 with the reason code (e.g. ``noItems``,
    ``unknownParticipant``) and nothing is stored.
    """
    meal = MealService.record_meal(repo, group_id, meal_data)
    return MealService.meal_response(meal)


@router.get("/groups/{group_id}/meals", response_model=List[MealResponse])
def list_day_meals(
    group_id: str,
    date_key: str = Query(..., description="Day to list, YYYY-MM-DD"),
    repo: MealRepository = Depends(get_meal_repository),
):
    """List a group's meals on one day, newest first"""
    meals = MealService.day_meals(repo, group_id, date_key)
    return [MealService.meal_response(meal) for meal in meals]


@router.get("/meals/{meal_id}", response_model=MealResponse)
def get_meal(meal_id: str, repo: MealRepository = Depends(get_meal_repository)):
    return MealService.meal_response(MealService.get_meal(repo, meal_id))


@router.patch("/meals/{meal_id}", response_model=MealResponse)
def update_meal(
    meal_id: str,
    changes: MealUpdate,
    repo: MealRepository = Depends(get_meal_repository),
):
    """
    Edit a meal's items, roster, restaurant or memo.

    Any change to items or roster re-validates every item and recomputes the
    settlement from scratch.
    """
    meal = MealService.edit_meal(repo, meal_id, changes)
    return MealService.meal_response(meal)


@router.delete("/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meal(meal_id: str, repo: MealRepository = Depends(get_meal_repository)):
    MealService.remove_meal(repo, meal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/groups/{group_id}/settlement", response_model=DaySettlementResponse)
def get_day_settlement(
    group_id: str,
    date_key: str = Query(..., description="Day to settle, YYYY-MM-DD"),
    repo: MealRepository = Depends(get_meal_repository),
):
    """Combined settlement of every meal the group had on one day"""
    return MealService.day_summary(repo, group_id, date_key)


@router.get("/groups/{group_id}/statistics", response_model=GroupStatisticsResponse)
def get_group_statistics(
    group_id: str,
    start: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="Last day, YYYY-MM-DD"),
    repo: MealRepository = Depends(get_meal_repository),
):
    """
    Group statistics: total spend, meal count, average per meal and what
    each participant owes over the whole history or a date range.
    """
    logger.info(f"Statistics requested for group {group_id} ({start}..{end})")
    return MealService.group_summary(repo, group_id, start, end)


@router.post(
    "/participants/guests",
    response_model=Participant,
    status_code=status.HTTP_201_CREATED,
)
def create_guest(guest: GuestCreate):
    """Create a one-off guest participant with a fresh id"""
    return ParticipantService.make_guest(guest.name)
