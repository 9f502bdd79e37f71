from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union
import logging
import secrets

from app.config import settings
from app.exceptions import MealValidationError
from domain.enums import ParticipantType, ValidationReason
from domain.schemas.participant_schemas import Participant

logger = logging.getLogger("lunchsplit.participants")

# Resolves a participant id to a display name; may raise or return None
NameLookup = Callable[[str], Optional[str]]


class ParticipantService:
    @staticmethod
    def make_guest(name: str) -> Participant:
        """
        Create an ad hoc guest for a single meal.

        Guest ids are generated fresh every time and are never reused, even
        for the same name.

        Raises:
            ServiceValidationError: If the name is blank
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise MealValidationError(
                ValidationReason.EMPTY_NAME, "Guest name must not be blank"
            )
        guest_id = f"guest_{secrets.token_hex(6)}"
        logger.debug(f"Created guest {guest_id} ({clean_name})")
        return Participant(id=guest_id, name=clean_name, type=ParticipantType.GUEST)

    @staticmethod
    def roster_ids(participants: Sequence[Participant]) -> List[str]:
        """
        Return roster ids in order, rejecting an empty or repeated roster.

        Raises:
            MealValidationError: noParticipants or duplicateParticipant
        """
        if not participants:
            raise MealValidationError(ValidationReason.NO_PARTICIPANTS)

        seen = set()
        ids = []
        for participant in participants:
            if participant.id in seen:
                raise MealValidationError(
                    ValidationReason.DUPLICATE_PARTICIPANT,
                    details={"participant_id": participant.id},
                )
            seen.add(participant.id)
            ids.append(participant.id)
        return ids

    @staticmethod
    def resolve_name(
        participant_id: str,
        participants: Iterable[Participant] = (),
        lookup: Union[NameLookup, Mapping[str, str], None] = None,
    ) -> str:
        """
        Resolve a participant id to a display name.

        The meal's own roster is consulted first, then the optional identity
        lookup. A lookup failure or a dangling id yields the configured
        fallback label; it never fails the caller.
        """
        for participant in participants:
            if participant.id == participant_id and participant.name:
                return participant.name

        if lookup is not None:
            try:
                if isinstance(lookup, Mapping):
                    name = lookup.get(participant_id)
                else:
                    name = lookup(participant_id)
            except Exception as e:
                logger.warning(f"Name lookup failed for participant {participant_id}: {e}")
                name = None
            if name:
                return name

        return settings.unknown_participant_label

    @staticmethod
    def index_by_id(participants: Iterable[Participant]) -> Dict[str, Participant]:
        """Latest roster entry per id; later meals win when names changed"""
        return {p.id: p for p in participants}
