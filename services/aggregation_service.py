from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union
from collections import defaultdict
from datetime import date
import logging

from domain.money import format_won, split_evenly
from domain.schemas.meal_schemas import MealRecord
from domain.schemas.participant_schemas import Participant
from domain.schemas.settlement_schemas import MealAggregate, SettlementLine
from services.participant_service import NameLookup, ParticipantService
from services.settlement_service import SettlementService

logger = logging.getLogger("lunchsplit.aggregation")

DateLike = Union[str, date]


def _date_key(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else value


class AggregationService:
    @staticmethod
    def aggregate(meals: Iterable[MealRecord]) -> MealAggregate:
        """
        Combine settlements of many meals in a single pass.

        The same reduction serves a single day and a group's whole history;
        callers choose the meals (see filter_by_date_key and
        filter_by_date_range).

        Returns:
            MealAggregate with per-participant totals, per-meal totals and
            the grand total
        """
        per_participant: Dict[str, int] = defaultdict(int)
        per_meal: Dict[str, int] = {}

        for meal in meals:
            per_meal[meal.id] = SettlementService.meal_total(meal.items)
            for participant_id, amount in meal.settlement.items():
                per_participant[participant_id] += amount
            # roster members absent from the settlement still count, with 0
            for participant in meal.participants:
                per_participant[participant.id] += 0

        return MealAggregate(
            per_participant_total=dict(per_participant),
            per_meal_total=per_meal,
            grand_total=sum(per_meal.values()),
        )

    @staticmethod
    def filter_by_date_key(meals: Iterable[MealRecord], date_key: DateLike) -> List[MealRecord]:
        key = _date_key(date_key)
        return [meal for meal in meals if meal.date_key == key]

    @staticmethod
    def filter_by_date_range(
        meals: Iterable[MealRecord],
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> List[MealRecord]:
        """Meals whose date key falls within [start, end]; open ends are unbounded"""
        start_key = _date_key(start) if start is not None else None
        end_key = _date_key(end) if end is not None else None
        return [
            meal
            for meal in meals
            if (start_key is None or meal.date_key >= start_key)
            and (end_key is None or meal.date_key <= end_key)
        ]

    @staticmethod
    def daily_totals(meals: Iterable[MealRecord]) -> Dict[str, int]:
        """Total spend per date key, in date order"""
        totals: Dict[str, int] = defaultdict(int)
        for meal in meals:
            totals[meal.date_key] += meal.total_amount
        return dict(sorted(totals.items()))

    @staticmethod
    def settlement_lines(
        per_participant_total: Mapping[str, int],
        participants: Iterable[Participant] = (),
        lookup: Union[NameLookup, Mapping[str, str], None] = None,
    ) -> List[SettlementLine]:
        """
        Resolve totals into display lines, largest amount first.

        Participants that no longer resolve keep their amount and get the
        fallback label.
        """
        roster = ParticipantService.index_by_id(participants)
        lines = []
        for participant_id, amount in per_participant_total.items():
            participant = roster.get(participant_id)
            lines.append(
                SettlementLine(
                    participant_id=participant_id,
                    name=ParticipantService.resolve_name(
                        participant_id, [participant] if participant else [], lookup
                    ),
                    type=participant.type if participant else None,
                    amount=amount,
                    formatted=format_won(amount),
                )
            )
        lines.sort(key=lambda line: line.amount, reverse=True)
        return lines

    @staticmethod
    def group_statistics(
        meals: Sequence[MealRecord],
        participants: Optional[Iterable[Participant]] = None,
        lookup: Union[NameLookup, Mapping[str, str], None] = None,
    ) -> dict:
        """
        Statistics for a group's meal history.

        Args:
            meals: Meals to summarise, already filtered by the caller
            participants: Group roster. Members who never ate still show up
                with 0. Defaults to everyone seen in ``meals``.
            lookup: Optional identity collaborator for display names

        Returns:
            Dict with total_amount, meal_count, average_per_meal (rounded
            half up, 0 without meals), participant_count, settlement lines
            and daily_totals
        """
        aggregate = AggregationService.aggregate(meals)

        if participants is None:
            roster: List[Participant] = []
            for meal in meals:
                roster.extend(meal.participants)
        else:
            roster = list(participants)

        per_participant = dict(aggregate.per_participant_total)
        for participant in roster:
            per_participant.setdefault(participant.id, 0)

        meal_count = len(meals)
        average = split_evenly(aggregate.grand_total, meal_count) if meal_count else 0

        logger.debug(
            f"Statistics over {meal_count} meals: total={aggregate.grand_total}"
        )

        return {
            "total_amount": aggregate.grand_total,
            "meal_count": meal_count,
            "average_per_meal": average,
            "participant_count": len(ParticipantService.index_by_id(roster)),
            "settlement": AggregationService.settlement_lines(per_participant, roster, lookup),
            "daily_totals": AggregationService.daily_totals(meals),
        }
