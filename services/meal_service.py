"""
Meal record lifecycle.

Every write goes through create_meal or update_meal, which validate the whole
meal and recompute split amounts, settlement and total from scratch, so a
stored record always agrees with its own items and roster. The persisting
helpers further down wrap those pure functions around a MealRepository and
never touch it when validation fails.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
from datetime import date, datetime, timezone
import logging
import re
import uuid

from app.config import settings
from app.exceptions import (
    MealValidationError,
    NotFoundError,
    SettlementIntegrityError,
)
from domain.enums import ValidationReason
from domain.mappers import MealMapper
from domain.schemas.meal_schemas import (
    LineItemInput,
    MealCreate,
    MealRecord,
    MealResponse,
    MealUpdate,
)
from domain.schemas.participant_schemas import Participant, RestaurantRef
from domain.schemas.settlement_schemas import (
    DaySettlementResponse,
    GroupStatisticsResponse,
)
from repositories.meal_repository import MealRepository
from services.aggregation_service import AggregationService
from services.line_item_service import LineItemService
from services.participant_service import NameLookup, ParticipantService
from services.settlement_service import SettlementService

logger = logging.getLogger("lunchsplit.meals")

_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

ItemData = Union[LineItemInput, Mapping[str, Any]]
ParticipantData = Union[Participant, Mapping[str, Any]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MealService:
    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def validate_date_key(date_key: Union[str, date, None]) -> str:
        """Return the date key as YYYY-MM-DD or raise invalidDateKey"""
        if isinstance(date_key, date):
            return date_key.isoformat()
        if not isinstance(date_key, str) or not _DATE_KEY.match(date_key):
            raise MealValidationError(
                ValidationReason.INVALID_DATE_KEY, details={"date_key": str(date_key)}
            )
        try:
            date.fromisoformat(date_key)
        except ValueError:
            raise MealValidationError(
                ValidationReason.INVALID_DATE_KEY, details={"date_key": date_key}
            ) from None
        return date_key

    @staticmethod
    def validate_restaurant(
        restaurant: Union[RestaurantRef, Mapping[str, Any], None]
    ) -> RestaurantRef:
        if restaurant is None:
            raise MealValidationError(ValidationReason.NO_RESTAURANT)
        if not isinstance(restaurant, RestaurantRef):
            restaurant = RestaurantRef.model_validate(dict(restaurant))
        if not restaurant.id.strip() or not restaurant.name.strip():
            raise MealValidationError(ValidationReason.NO_RESTAURANT)
        return restaurant.model_copy(
            update={"id": restaurant.id.strip(), "name": restaurant.name.strip()}
        )

    @staticmethod
    def validate_memo(memo: Optional[str]) -> str:
        """Trimmed memo, or memoTooLong past the configured limit"""
        memo = (memo or "").strip()
        if len(memo) > settings.max_memo_length:
            raise MealValidationError(
                ValidationReason.MEMO_TOO_LONG,
                details={"max_length": settings.max_memo_length},
            )
        return memo

    @staticmethod
    def normalize_participants(participants: Iterable[ParticipantData]) -> List[Participant]:
        normalized = []
        for participant in participants:
            if not isinstance(participant, Participant):
                participant = Participant.model_validate(dict(participant))
            normalized.append(participant.model_copy(update={"name": participant.name.strip()}))
        return normalized

    # ------------------------------------------------------------------
    # Lifecycle (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def create_meal(
        group_id: str,
        date_key: Union[str, date],
        restaurant: Union[RestaurantRef, Mapping[str, Any], None],
        items: Sequence[ItemData],
        participants: Sequence[ParticipantData],
        memo: str = "",
        actor_id: Optional[str] = None,
        meal_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MealRecord:
        """
        Validate a submitted meal and build the full record.

        Nothing is persisted here; the caller stores the returned record
        verbatim. Validation is all-or-nothing: the first problem aborts.

        Args:
            group_id: Owning group
            date_key: Meal date (YYYY-MM-DD or date)
            restaurant: Restaurant reference; id must not be blank
            items: Raw line items
            participants: Meal roster
            memo: Free text, trimmed
            actor_id: User recording the meal, stamped as created_by
            meal_id: Id to use; generated when omitted
            now: Timestamp override

        Returns:
            MealRecord with derived split amounts, settlement and total

        Raises:
            MealValidationError: noRestaurant, noItems, noParticipants,
                duplicateParticipant, invalidDateKey, memoTooLong or any
                item failure
            UnknownParticipantError: If an item names someone outside the roster
        """
        restaurant_ref = MealService.validate_restaurant(restaurant)
        if not items:
            raise MealValidationError(ValidationReason.NO_ITEMS)
        roster = MealService.normalize_participants(participants)
        roster_ids = ParticipantService.roster_ids(roster)
        date_key = MealService.validate_date_key(date_key)
        memo = MealService.validate_memo(memo)

        line_items = LineItemService.build_items(items, roster_ids)
        settlement = SettlementService.compute_settlement(line_items, roster)
        timestamp = now or _now()

        return MealRecord(
            id=meal_id or uuid.uuid4().hex,
            group_id=group_id,
            date_key=date_key,
            restaurant=restaurant_ref,
            items=tuple(line_items),
            participants=tuple(roster),
            memo=memo,
            settlement=settlement,
            total_amount=SettlementService.meal_total(line_items),
            created_by=actor_id,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @staticmethod
    def update_meal(
        existing: MealRecord,
        changes: Union[MealUpdate, Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> MealRecord:
        """
        Apply an edit and return a new record; ``existing`` is left untouched.

        When items or participants change, every item (changed or not) is
        validated again against the resulting roster and settlement is
        recomputed from scratch. Removing the only consumer of an item is
        therefore rejected instead of silently dropping the item's cost.

        Raises:
            MealValidationError: Same reasons as create_meal
            UnknownParticipantError: If an item names someone outside the new roster
        """
        if not isinstance(changes, MealUpdate):
            changes = MealUpdate.model_validate(dict(changes))

        update: Dict[str, Any] = {"updated_at": now or _now()}

        if changes.restaurant is not None:
            update["restaurant"] = MealService.validate_restaurant(changes.restaurant)

        if changes.memo is not None:
            update["memo"] = MealService.validate_memo(changes.memo)

        if changes.touches_settlement():
            if changes.participants is not None:
                roster = MealService.normalize_participants(changes.participants)
            else:
                roster = list(existing.participants)
            roster_ids = ParticipantService.roster_ids(roster)

            if changes.items is not None:
                inputs = changes.items
            else:
                inputs = [item.to_input() for item in existing.items]

            line_items = LineItemService.build_items(
                inputs, roster_ids, known_ids=[item.id for item in existing.items]
            )
            update.update(
                {
                    "items": tuple(line_items),
                    "participants": tuple(roster),
                    "settlement": SettlementService.compute_settlement(line_items, roster),
                    "total_amount": SettlementService.meal_total(line_items),
                }
            )
        else:
            # model_copy is shallow; the new record must not share this dict
            update["settlement"] = dict(existing.settlement)

        return existing.model_copy(update=update)

    @staticmethod
    def reconstruct(document: Mapping[str, Any]) -> MealRecord:
        """
        Rebuild a MealRecord from a stored document of any revision.

        Split amounts and settlement are recomputed; stored values are only
        compared and a mismatch is logged.

        Raises:
            SettlementIntegrityError: If the stored items or roster no longer
                pass validation
        """
        normalized = MealMapper.normalize_document(document)
        meal_id = normalized["id"]
        try:
            roster = MealService.normalize_participants(normalized["participants"])
            roster_ids = ParticipantService.roster_ids(roster)
            inputs = MealMapper.item_inputs(normalized)
            line_items = LineItemService.build_items(
                inputs, roster_ids, known_ids=[item["id"] for item in inputs]
            )
        except MealValidationError as e:
            logger.error(f"Stored meal {meal_id} is invalid: {e.code} {e.details}")
            raise SettlementIntegrityError(
                f"Stored meal {meal_id} is invalid: {e.message}",
                details={"meal_id": meal_id, "reason": e.code},
            ) from e

        settlement = SettlementService.compute_settlement(line_items, roster)
        stored = document.get("settlement")
        if stored is not None and stored != settlement:
            logger.warning(f"Stored settlement for meal {meal_id} was stale; recomputed")

        created_at = normalized["created_at"] or _now()
        restaurant = normalized["restaurant"]
        return MealRecord(
            id=meal_id,
            group_id=normalized["group_id"],
            date_key=normalized["date_key"],
            restaurant=RestaurantRef(
                id=restaurant.get("id") or "",
                # dangling registry reference
                name=restaurant.get("name") or settings.unknown_restaurant_label,
                category=restaurant.get("category"),
            ),
            items=tuple(line_items),
            participants=tuple(roster),
            memo=normalized["memo"],
            settlement=settlement,
            total_amount=SettlementService.meal_total(line_items),
            created_by=normalized["created_by"],
            created_at=created_at,
            updated_at=normalized["updated_at"] or created_at,
        )

    @staticmethod
    def verify(meal: MealRecord) -> bool:
        """True when the record's derived values match a fresh recompute"""
        try:
            rebuilt = MealService.update_meal(
                meal, MealUpdate(participants=list(meal.participants)), now=meal.updated_at
            )
        except MealValidationError:
            return False
        return (
            rebuilt.items == meal.items
            and rebuilt.settlement == meal.settlement
            and rebuilt.total_amount == meal.total_amount
        )

    @staticmethod
    def meal_response(
        meal: MealRecord, lookup: Union[NameLookup, Mapping[str, str], None] = None
    ) -> MealResponse:
        return MealResponse(
            meal=meal,
            settlement_lines=AggregationService.settlement_lines(
                meal.settlement, meal.participants, lookup
            ),
            rounding_discrepancy=SettlementService.rounding_discrepancy(
                meal.items, meal.settlement
            ),
        )

    # ------------------------------------------------------------------
    # Persisting wrappers
    # ------------------------------------------------------------------

    @staticmethod
    def record_meal(
        repo: MealRepository, group_id: str, data: MealCreate
    ) -> MealRecord:
        """Validate, compute and store a new meal"""
        meal = MealService.create_meal(
            group_id=group_id,
            date_key=data.date_key,
            restaurant=data.restaurant,
            items=data.items,
            participants=data.participants,
            memo=data.memo,
            actor_id=data.actor_id,
        )
        repo.put(meal)
        logger.info(
            f"Meal {meal.id} recorded for group {group_id} on {meal.date_key}: "
            f"{len(meal.items)} items, total={meal.total_amount}"
        )
        return meal

    @staticmethod
    def get_meal(repo: MealRepository, meal_id: str) -> MealRecord:
        document = repo.get_by_id(meal_id)
        if document is None:
            raise NotFoundError(f"Meal {meal_id} not found")
        return MealService.reconstruct(document)

    @staticmethod
    def edit_meal(
        repo: MealRepository, meal_id: str, changes: Union[MealUpdate, Mapping[str, Any]]
    ) -> MealRecord:
        """Load, update, recompute and store a meal"""
        existing = MealService.get_meal(repo, meal_id)
        updated = MealService.update_meal(existing, changes)
        repo.put(updated)
        logger.info(f"Meal {meal_id} updated: total={updated.total_amount}")
        return updated

    @staticmethod
    def remove_meal(repo: MealRepository, meal_id: str) -> None:
        if not repo.delete(meal_id):
            raise NotFoundError(f"Meal {meal_id} not found")
        logger.info(f"Meal {meal_id} deleted")

    @staticmethod
    def day_meals(repo: MealRepository, group_id: str, date_key: str) -> List[MealRecord]:
        date_key = MealService.validate_date_key(date_key)
        return [
            MealService.reconstruct(doc)
            for doc in repo.get_by_group_and_date(group_id, date_key)
        ]

    @staticmethod
    def group_meals(
        repo: MealRepository,
        group_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[MealRecord]:
        if start is not None:
            start = MealService.validate_date_key(start)
        if end is not None:
            end = MealService.validate_date_key(end)

        if start is not None and end is not None:
            documents = repo.get_by_group_and_date_range(group_id, start, end)
            return [MealService.reconstruct(doc) for doc in documents]

        meals = [MealService.reconstruct(doc) for doc in repo.get_by_group(group_id)]
        return AggregationService.filter_by_date_range(meals, start, end)

    @staticmethod
    def day_summary(
        repo: MealRepository,
        group_id: str,
        date_key: str,
        lookup: Union[NameLookup, Mapping[str, str], None] = None,
    ) -> DaySettlementResponse:
        """Combined settlement of every meal a group had on one day"""
        meals = MealService.day_meals(repo, group_id, date_key)
        aggregate = AggregationService.aggregate(meals)
        roster = [p for meal in meals for p in meal.participants]
        return DaySettlementResponse(
            group_id=group_id,
            date_key=date_key,
            meal_count=len(meals),
            grand_total=aggregate.grand_total,
            per_meal_total=aggregate.per_meal_total,
            settlement=AggregationService.settlement_lines(
                aggregate.per_participant_total, roster, lookup
            ),
        )

    @staticmethod
    def group_summary(
        repo: MealRepository,
        group_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
        participants: Optional[Sequence[Participant]] = None,
        lookup: Union[NameLookup, Mapping[str, str], None] = None,
    ) -> GroupStatisticsResponse:
        """Group statistics over its whole history or a date range"""
        meals = MealService.group_meals(repo, group_id, start, end)
        stats = AggregationService.group_statistics(meals, participants, lookup)
        return GroupStatisticsResponse(group_id=group_id, start=start, end=end, **stats)
