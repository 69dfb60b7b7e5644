"""Courier aggregate (CQRS) — the delivery-person role.

A courier holds at most one delivery at a time, tracked by ``availability``:

    Available → Assigned    (claim, when a delivery is accepted or contracted)
    Assigned  → Available   (release, when that delivery is confirmed)

Both moves go through ``compare_and_set`` so that two concurrent claims
cannot both succeed and a release is applied at most once.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String

from marketplace.domain import marketplace
from marketplace.utils.conditional import compare_and_set


class CourierAvailability(Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"


@marketplace.aggregate
class Courier:
    name = String(required=True, max_length=255)
    phone = String(max_length=50)
    availability = String(
        choices=CourierAvailability,
        default=CourierAvailability.AVAILABLE.value,
    )
    created_at = DateTime()

    @classmethod
    def register(cls, name: str, phone: str | None = None, courier_id: str | None = None):
        """Register a courier. ``courier_id`` lets the user id double as the courier id."""
        kwargs = {"id": courier_id} if courier_id else {}
        return cls(
            name=name,
            phone=phone,
            availability=CourierAvailability.AVAILABLE.value,
            created_at=datetime.now(UTC),
            **kwargs,
        )

    @property
    def is_available(self) -> bool:
        return self.availability == CourierAvailability.AVAILABLE.value


def claim_courier(courier_id) -> bool:
    """Move a courier from Available to Assigned. False if already assigned."""
    return compare_and_set(
        Courier,
        {"id": courier_id, "availability": CourierAvailability.AVAILABLE.value},
        availability=CourierAvailability.ASSIGNED.value,
    )


def release_courier(courier_id) -> bool:
    """Move a courier from Assigned back to Available. False if not assigned."""
    return compare_and_set(
        Courier,
        {"id": courier_id, "availability": CourierAvailability.ASSIGNED.value},
        availability=CourierAvailability.AVAILABLE.value,
    )
