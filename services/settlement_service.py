"""
Settlement calculation.

Turns a meal's line items and participant roster into the amount each
participant owes. Everything here is a pure function of its inputs.
"""

from typing import Dict, Iterable, Sequence
import logging

from app.exceptions import SettlementIntegrityError, UnknownParticipantError
from domain.enums import ItemType
from domain.money import sum_amounts
from domain.schemas.meal_schemas import LineItem, MealRecord
from domain.schemas.participant_schemas import Participant
from services.line_item_service import LineItemService

logger = logging.getLogger("lunchsplit.settlement")


class SettlementService:
    @staticmethod
    def compute_settlement(
        items: Sequence[LineItem], participants: Sequence[Participant]
    ) -> Dict[str, int]:
        """
        Compute what each participant owes for one meal.

        Every roster participant appears in the result, with 0 if they
        consumed nothing. Individual items charge their full price to the
        sole consumer; shared items charge the stored split amount to every
        consumer, so the amount shown on the item and the amount settled
        never disagree.

        Rounding shortfalls on shared items are not redistributed.

        Args:
            items: Validated line items
            participants: Full roster for the meal

        Returns:
            Mapping of participant id to owed amount

        Raises:
            UnknownParticipantError: If an item names someone outside the roster
            SettlementIntegrityError: If an item has no consumers, or a shared
                item's split amount is missing or stale
        """
        settlement: Dict[str, int] = {p.id: 0 for p in participants}

        for item in items:
            if not item.consumer_ids:
                logger.error(f"Item {item.id} reached settlement without consumers")
                raise SettlementIntegrityError(
                    f"Item '{item.name}' has no consumers",
                    details={"item_id": item.id},
                )

            for consumer_id in item.consumer_ids:
                if consumer_id not in settlement:
                    raise UnknownParticipantError(consumer_id, item_name=item.name)

            if item.type == ItemType.INDIVIDUAL:
                if len(item.consumer_ids) != 1:
                    raise SettlementIntegrityError(
                        f"Individual item '{item.name}' must have exactly one consumer",
                        details={"item_id": item.id, "consumer_ids": list(item.consumer_ids)},
                    )
                settlement[item.consumer_ids[0]] += item.price
            else:
                expected = LineItemService.expected_split(item)
                if item.split_amount != expected:
                    logger.error(
                        f"Stale split on item {item.id}: stored={item.split_amount} expected={expected}"
                    )
                    raise SettlementIntegrityError(
                        f"Shared item '{item.name}' carries a stale split amount",
                        details={
                            "item_id": item.id,
                            "split_amount": item.split_amount,
                            "expected": expected,
                        },
                    )
                for consumer_id in item.consumer_ids:
                    settlement[consumer_id] += item.split_amount

        return settlement

    @staticmethod
    def meal_total(items: Iterable[LineItem]) -> int:
        return sum_amounts(item.price for item in items)

    @staticmethod
    def rounding_discrepancy(items: Sequence[LineItem], settlement: Dict[str, int]) -> int:
        """
        Difference between what was spent and what was settled.

        Positive when shared splits rounded down, negative when they rounded
        up. Never raises: the discrepancy is an accepted approximation.
        """
        return SettlementService.meal_total(items) - sum_amounts(settlement.values())

    @staticmethod
    def participant_share(meals: Iterable[MealRecord], participant_id: str) -> int:
        """Total one participant owes across meals, recomputed from the items"""
        total = 0
        for meal in meals:
            for item in meal.items:
                if participant_id not in item.consumer_ids:
                    continue
                if item.type == ItemType.INDIVIDUAL:
                    total += item.price
                else:
                    total += item.split_amount or 0
        return total
