from typing import Any, Iterable, List, Mapping, Optional, Union
import logging
import secrets

from app.config import settings
from app.exceptions import MealValidationError, UnknownParticipantError
from domain.enums import ItemType, ValidationReason
from domain.money import parse_amount, split_evenly
from domain.schemas.meal_schemas import LineItem, LineItemInput

logger = logging.getLogger("lunchsplit.line_items")


def new_item_id() -> str:
    return f"item_{secrets.token_hex(8)}"


class LineItemService:
    @staticmethod
    def build_item(
        data: Union[LineItemInput, Mapping[str, Any]],
        roster_ids: Optional[Iterable[str]] = None,
        item_id: Optional[str] = None,
    ) -> LineItem:
        """
        Validate raw form input and turn it into a normalized LineItem.

        Checks run in a fixed order so the first problem the user would see
        in the form is the one reported: name, price, type, consumers.

        Args:
            data: LineItemInput or a plain dict with the same keys
            roster_ids: Ids of the meal's participants. When given, every
                consumer must be one of them.
            item_id: Id to keep for an existing item. Falls back to
                ``data.id`` and then to a freshly generated id.

        Returns:
            LineItem with trimmed name, integer price, consumer ids and, for
            shared items, the derived split amount

        Raises:
            MealValidationError: emptyName, nameTooLong, invalidPrice, invalidItemType,
                noConsumerSelected, noParticipantsSelected or
                duplicateParticipant
            UnknownParticipantError: If a consumer is not in ``roster_ids``
        """
        if not isinstance(data, LineItemInput):
            data = LineItemInput.model_validate(dict(data))

        name = (data.name or "").strip()
        if not name:
            raise MealValidationError(ValidationReason.EMPTY_NAME)
        if len(name) > settings.max_item_name_length:
            raise MealValidationError(
                ValidationReason.NAME_TOO_LONG,
                details={"max_length": settings.max_item_name_length},
            )

        price = parse_amount(data.price)

        try:
            item_type = ItemType(data.type)
        except ValueError:
            raise MealValidationError(
                ValidationReason.INVALID_ITEM_TYPE, details={"type": data.type}
            ) from None

        if item_type == ItemType.INDIVIDUAL:
            if not data.member_id:
                raise MealValidationError(
                    ValidationReason.NO_CONSUMER_SELECTED, details={"item_name": name}
                )
            consumer_ids = (data.member_id,)
        else:
            if not data.participant_ids:
                raise MealValidationError(
                    ValidationReason.NO_PARTICIPANTS_SELECTED, details={"item_name": name}
                )
            consumer_ids = tuple(data.participant_ids)
            if len(set(consumer_ids)) != len(consumer_ids):
                raise MealValidationError(
                    ValidationReason.DUPLICATE_PARTICIPANT, details={"item_name": name}
                )

        if roster_ids is not None:
            roster = set(roster_ids)
            for consumer_id in consumer_ids:
                if consumer_id not in roster:
                    raise UnknownParticipantError(consumer_id, item_name=name)

        split_amount = None
        if item_type == ItemType.SHARED:
            split_amount = split_evenly(price, len(consumer_ids))

        return LineItem(
            id=item_id or data.id or new_item_id(),
            name=name,
            price=price,
            type=item_type,
            consumer_ids=consumer_ids,
            split_amount=split_amount,
        )

    @staticmethod
    def build_items(
        items: Iterable[Union[LineItemInput, Mapping[str, Any]]],
        roster_ids: Optional[Iterable[str]] = None,
        known_ids: Optional[Iterable[str]] = None,
    ) -> List[LineItem]:
        """
        Validate a whole item list; the first invalid item aborts.

        Args:
            items: Raw item inputs
            roster_ids: Meal roster every consumer must belong to
            known_ids: Ids of items that already exist on the meal. A
                submitted id is kept only if it is known and not already
                used by an earlier item; everything else gets a fresh id.

        Raises:
            MealValidationError: noItems for an empty list, or the first
                item's validation failure (with its position in details)
        """
        items = [
            item if isinstance(item, LineItemInput) else LineItemInput.model_validate(dict(item))
            for item in items
        ]
        if not items:
            raise MealValidationError(ValidationReason.NO_ITEMS)

        roster = list(roster_ids) if roster_ids is not None else None
        known = set(known_ids or ())
        used = set()
        built = []
        for index, item in enumerate(items):
            if item.id and item.id in known and item.id not in used:
                item_id = item.id
            else:
                item_id = new_item_id()
            used.add(item_id)
            try:
                built.append(LineItemService.build_item(item, roster, item_id=item_id))
            except MealValidationError as e:
                details = dict(e.details or {})
                details["item_index"] = index
                e.details = details
                logger.warning(f"Rejected item #{index}: {e.code}")
                raise
        return built

    @staticmethod
    def rederive(item: LineItem, roster_ids: Optional[Iterable[str]] = None) -> LineItem:
        """
        Re-validate an existing item and recompute its split amount.

        The item id is preserved so edits never churn identifiers. Used when
        the roster changes under an otherwise unchanged item.
        """
        return LineItemService.build_item(item.to_input(), roster_ids, item_id=item.id)

    @staticmethod
    def expected_split(item: LineItem) -> Optional[int]:
        """Split amount the item should carry given its current inputs"""
        if item.type != ItemType.SHARED or not item.consumer_ids:
            return None
        return split_evenly(item.price, len(item.consumer_ids))
