"""
Tests for line item construction and validation.

Covers the form-level rules for individual and shared items and the split
amount derived for shared items.
"""

import pytest

from app.exceptions import MealValidationError, UnknownParticipantError
from domain.enums import ItemType, ValidationReason
from domain.schemas.meal_schemas import LineItemInput
from services.line_item_service import LineItemService

from test_fixtures import individual, shared


# =============================================================================
# VALID ITEMS
# =============================================================================


def test_build_individual_item():
    """
    Verifies:
    - Name is trimmed and price parsed to int
    - The single consumer is recorded
    - No split amount for individual items
    """
    item = LineItemService.build_item(individual(name="  김치찌개 ", price="8,000"))

    assert item.name == "김치찌개"
    assert item.price == 8000
    assert item.type == ItemType.INDIVIDUAL
    assert item.consumer_ids == ("A",)
    assert item.member_id == "A"
    assert item.split_amount is None
    assert item.id.startswith("item_")


def test_build_shared_item_computes_split():
    item = LineItemService.build_item(shared(price=30000, participant_ids=["A", "B", "C"]))

    assert item.type == ItemType.SHARED
    assert item.split_amount == 10000
    assert item.consumer_ids == ("A", "B", "C")
    assert item.member_id is None


def test_build_shared_item_rounding_shortfall():
    """10000 split three ways is 3333 each; one won is never settled"""
    item = LineItemService.build_item(shared(price=10000))

    assert item.split_amount == 3333
    assert item.split_amount * len(item.consumer_ids) == 9999


def test_build_item_accepts_schema_input():
    data = LineItemInput(name="짬뽕", price=9000, type="individual", member_id="B")

    item = LineItemService.build_item(data, roster_ids=["A", "B"])

    assert item.consumer_ids == ("B",)


def test_fresh_ids_are_unique():
    first = LineItemService.build_item(individual())
    second = LineItemService.build_item(individual())

    assert first.id != second.id


# =============================================================================
# VALIDATION FAILURES
# =============================================================================


@pytest.mark.parametrize(
    "data, reason",
    [
        (individual(name="   "), ValidationReason.EMPTY_NAME),
        (individual(price=0), ValidationReason.INVALID_PRICE),
        (individual(price="만원"), ValidationReason.INVALID_PRICE),
        (individual(member_id=None), ValidationReason.NO_CONSUMER_SELECTED),
        (shared(participant_ids=[]), ValidationReason.NO_PARTICIPANTS_SELECTED),
        (shared(participant_ids=["A", "A"]), ValidationReason.DUPLICATE_PARTICIPANT),
        ({**individual(), "type": "dessert"}, ValidationReason.INVALID_ITEM_TYPE),
    ],
)
def test_build_item_rejects_invalid_input(data, reason):
    with pytest.raises(MealValidationError) as exc_info:
        LineItemService.build_item(data)

    assert exc_info.value.reason == reason


def test_item_name_length_limit():
    """
    Verifies:
    - A 50 character name is accepted
    - A 51 character name is rejected with nameTooLong
    """
    assert len(LineItemService.build_item(individual(name="가" * 50)).name) == 50

    with pytest.raises(MealValidationError) as exc_info:
        LineItemService.build_item(individual(name="가" * 51))

    assert exc_info.value.reason == ValidationReason.NAME_TOO_LONG


def test_name_is_checked_before_price():
    with pytest.raises(MealValidationError) as exc_info:
        LineItemService.build_item(individual(name="", price=-1))

    assert exc_info.value.reason == ValidationReason.EMPTY_NAME


def test_consumer_outside_roster_is_rejected():
    """
    Verifies:
    - Strict policy: unknown consumers raise instead of being ignored
    - The error names the offending participant
    """
    with pytest.raises(UnknownParticipantError) as exc_info:
        LineItemService.build_item(shared(participant_ids=["A", "Z"]), roster_ids=["A", "B"])

    assert exc_info.value.reason == ValidationReason.UNKNOWN_PARTICIPANT
    assert exc_info.value.participant_id == "Z"


# =============================================================================
# ITEM LISTS AND RE-DERIVATION
# =============================================================================


def test_build_items_requires_at_least_one_item():
    with pytest.raises(MealValidationError) as exc_info:
        LineItemService.build_items([])

    assert exc_info.value.reason == ValidationReason.NO_ITEMS


def test_build_items_reports_failing_index():
    with pytest.raises(MealValidationError) as exc_info:
        LineItemService.build_items([individual(), individual(price=-100)])

    assert exc_info.value.details["item_index"] == 1


def test_build_items_keeps_only_known_ids():
    """
    Verifies:
    - Known ids survive a rebuild
    - Unknown or repeated ids are replaced with fresh ones
    """
    items = LineItemService.build_items(
        [
            individual(item_id="item_keep"),
            individual(item_id="item_keep"),
            individual(item_id="item_forged"),
        ],
        known_ids=["item_keep"],
    )

    assert items[0].id == "item_keep"
    assert items[1].id not in ("item_keep", "item_forged")
    assert items[2].id != "item_forged"


def test_rederive_preserves_id_and_recomputes_split():
    item = LineItemService.build_item(shared(price=30000, participant_ids=["A", "B", "C"]))
    fewer = item.model_copy(update={"consumer_ids": ("A", "B")})

    rederived = LineItemService.rederive(fewer, roster_ids=["A", "B"])

    assert rederived.id == item.id
    assert rederived.split_amount == 15000


def test_rederive_rejects_consumer_removed_from_roster():
    item = LineItemService.build_item(individual(member_id="B"))

    with pytest.raises(UnknownParticipantError):
        LineItemService.rederive(item, roster_ids=["A", "C"])
