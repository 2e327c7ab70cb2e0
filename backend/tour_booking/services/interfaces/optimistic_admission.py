"""
Optimistic admission strategy - no serialization.
Reproduces the unguarded read-then-write behavior.
"""

from typing import Optional

from tour_booking.services.interfaces.admission import AdmissionStrategy


class OptimisticAdmission(AdmissionStrategy):
    """
    Always admit immediately.

    Two concurrent requests for the same activity/day can both see the same
    booked total and both be accepted, exceeding max_group_size.

    Use when:
    - Reproducing legacy behavior
    - Overbooking is tolerated and resolved by staff
    """

    name = "optimistic"

    async def acquire(self, key: str) -> Optional[str]:
        return "optimistic"

    async def release(self, key: str, token: str) -> None:
        pass
