"""
Domain enums for LunchSplit.
Contains all enumeration types used across the domain models.
"""

import enum


class ParticipantType(str, enum.Enum):
    """Kinds of people who can owe money for a meal"""

    MEMBER = "member"  # registered app user
    REGULAR = "regular"  # tracked by the group, no account
    GUEST = "guest"  # ad hoc, scoped to one meal


class ItemType(str, enum.Enum):
    """How a line item is paid for"""

    INDIVIDUAL = "individual"
    SHARED = "shared"


class ValidationReason(str, enum.Enum):
    """Machine-readable reasons for rejecting meal input"""

    EMPTY_NAME = "emptyName"
    INVALID_PRICE = "invalidPrice"
    NO_CONSUMER_SELECTED = "noConsumerSelected"
    NO_PARTICIPANTS_SELECTED = "noParticipantsSelected"
    UNKNOWN_PARTICIPANT = "unknownParticipant"
    DUPLICATE_PARTICIPANT = "duplicateParticipant"
    NO_RESTAURANT = "noRestaurant"
    NO_ITEMS = "noItems"
    NO_PARTICIPANTS = "noParticipants"
    INVALID_DATE_KEY = "invalidDateKey"
    INVALID_ITEM_TYPE = "invalidItemType"
    NAME_TOO_LONG = "nameTooLong"
    MEMO_TOO_LONG = "memoTooLong"

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]


_DEFAULT_MESSAGES = {
    ValidationReason.EMPTY_NAME: "Item name must not be blank",
    ValidationReason.INVALID_PRICE: "Item price must be a positive whole amount",
    ValidationReason.NO_CONSUMER_SELECTED: "Select who ate this item",
    ValidationReason.NO_PARTICIPANTS_SELECTED: "Select at least one participant for a shared item",
    ValidationReason.UNKNOWN_PARTICIPANT: "Item references a participant who is not part of this meal",
    ValidationReason.DUPLICATE_PARTICIPANT: "The same participant is listed more than once",
    ValidationReason.NO_RESTAURANT: "Select a restaurant",
    ValidationReason.NO_ITEMS: "Add at least one item",
    ValidationReason.NO_PARTICIPANTS: "Add at least one participant",
    ValidationReason.INVALID_DATE_KEY: "Date key must be in YYYY-MM-DD format",
    ValidationReason.INVALID_ITEM_TYPE: "Item type must be 'individual' or 'shared'",
    ValidationReason.NAME_TOO_LONG: "Item name is too long",
    ValidationReason.MEMO_TOO_LONG: "Memo is too long",
}
