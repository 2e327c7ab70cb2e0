"""
Booking model representing a customer's reservation for an activity on a day.

Key design decisions:
- date is a calendar day (no time component), so same-day bookings aggregate
  with a plain equality filter
- activity_id is not a foreign key: bookings outlive deleted activities
- Composite index on (activity_id, date) serves the capacity sum
"""

from sqlalchemy import CheckConstraint, Column, Date, Index, Integer, String, Text

from tour_booking.db.base import Base, TimestampMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    activity_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    people = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    crm_reference = Column(String(100), nullable=True)

    __table_args__ = (
        CheckConstraint("people > 0", name="check_booking_people_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"
        ),
        Index("ix_bookings_activity_date", "activity_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, activity={self.activity_id}, date={self.date}, "
            f"people={self.people}, status={self.status})>"
        )
