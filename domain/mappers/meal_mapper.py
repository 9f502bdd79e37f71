"""
Meal document mappers.
Handles transformation between stored meal documents and the canonical meal shape.

Meal documents were written by several revisions of the meal form:

* flat: ``totalAmount`` split N ways over a ``participants`` id list, no items
* per-item: items with ``amount`` and either ``memberId`` or a
  ``participants`` id list plus ``splitAmount``; no meal-level roster
* consumer-id: items with ``price`` and ``consumerId`` / ``consumerIds``; the
  meal carries ``participants`` as ``{id, name, type}`` objects
* canonical: what :meth:`MealMapper.to_document` writes today

normalize_document folds all of them into the canonical dict. It never copies
derived values (split amounts, settlement, totals); those are recomputed by
the meal service from the items and roster.
"""

from typing import Any, Dict, List, Mapping

from domain.enums import ItemType, ParticipantType
from domain.schemas.meal_schemas import MealRecord

FLAT_BILL_ITEM_NAME = "전체 식사"


def _participant_from_raw(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, Mapping):
        return {
            "id": raw.get("id"),
            "name": raw.get("name") or "",
            "type": raw.get("type") or _infer_participant_type(raw.get("id")),
        }
    return {"id": raw, "name": "", "type": _infer_participant_type(raw)}


def _infer_participant_type(participant_id: Any) -> str:
    if isinstance(participant_id, str) and participant_id.startswith("guest_"):
        return ParticipantType.GUEST.value
    return ParticipantType.MEMBER.value


def _item_from_raw(raw: Mapping[str, Any], index: int) -> Dict[str, Any]:
    price = raw.get("price", raw.get("amount"))
    item_type = raw.get("type") or ItemType.INDIVIDUAL.value

    if "consumer_ids" in raw:
        consumers = list(raw.get("consumer_ids") or [])
    elif item_type == ItemType.INDIVIDUAL.value:
        consumer = raw.get("member_id") or raw.get("memberId") or raw.get("consumerId")
        consumers = [consumer] if consumer else []
    else:
        consumers = list(
            raw.get("participant_ids")
            or raw.get("consumerIds")
            or raw.get("participants")
            or []
        )
        consumers = [c.get("id") if isinstance(c, Mapping) else c for c in consumers]

    return {
        "id": raw.get("id") or f"item_{index}",
        "name": raw.get("name") or "",
        "price": price,
        "type": item_type,
        "consumer_ids": consumers,
    }


class MealMapper:
    """Mapper for meal document transformations."""

    @staticmethod
    def to_document(meal: MealRecord) -> Dict[str, Any]:
        """
        Convert a MealRecord to the canonical JSON-ready document.

        Derived values are included so readers that only display data do not
        have to recompute them.
        """
        return meal.model_dump(mode="json")

    @staticmethod
    def normalize_document(doc: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Fold any historical document revision into the canonical shape.

        Args:
            doc: Stored document of any revision

        Returns:
            Dict with id, group_id, date_key, restaurant, items (price, type,
            consumer_ids), participants ({id, name, type}), memo, created_by,
            created_at and updated_at. No derived values.
        """
        restaurant = doc.get("restaurant")
        if not isinstance(restaurant, Mapping):
            restaurant = {
                "id": doc.get("restaurantId") or "",
                "name": doc.get("restaurantName") or "",
                "category": doc.get("restaurantCategory"),
            }

        raw_items = doc.get("items")
        if raw_items:
            items = [_item_from_raw(raw, index) for index, raw in enumerate(raw_items)]
        elif doc.get("totalAmount") is not None:
            # flat revision: the whole bill is one item shared by everyone
            consumers = [
                p.get("id") if isinstance(p, Mapping) else p
                for p in doc.get("participants") or []
            ]
            items = [
                {
                    "id": "item_0",
                    "name": FLAT_BILL_ITEM_NAME,
                    "price": doc.get("totalAmount"),
                    "type": ItemType.SHARED.value,
                    "consumer_ids": consumers,
                }
            ]
        else:
            items = []

        raw_roster = doc.get("participants")
        if raw_roster:
            participants = [_participant_from_raw(p) for p in raw_roster]
        else:
            # per-item revision: the roster is whoever appears on an item
            participants = []
            seen = set()
            for item in items:
                for consumer_id in item["consumer_ids"]:
                    if consumer_id and consumer_id not in seen:
                        seen.add(consumer_id)
                        participants.append(_participant_from_raw(consumer_id))

        created_at = doc.get("created_at") or doc.get("createdAt")
        updated_at = doc.get("updated_at") or doc.get("updatedAt") or created_at

        return {
            "id": doc.get("id"),
            "group_id": doc.get("group_id") or doc.get("groupId"),
            "date_key": doc.get("date_key") or doc.get("dateKey"),
            "restaurant": dict(restaurant),
            "items": items,
            "participants": participants,
            "memo": (doc.get("memo") or "").strip(),
            "created_by": doc.get("created_by") or doc.get("createdBy"),
            "created_at": created_at,
            "updated_at": updated_at,
        }

    @staticmethod
    def item_inputs(normalized: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Canonical items as LineItemInput-compatible dicts"""
        inputs = []
        for item in normalized.get("items", []):
            entry = {
                "id": item["id"],
                "name": item["name"],
                "price": item["price"],
                "type": item["type"],
            }
            if item["type"] == ItemType.INDIVIDUAL.value:
                entry["member_id"] = item["consumer_ids"][0] if item["consumer_ids"] else None
            else:
                entry["participant_ids"] = list(item["consumer_ids"])
            inputs.append(entry)
        return inputs
