"""
Activity (tour) offered by the agency.

Key design decisions:
- max_group_size is nullable: NULL means no per-day capacity limit
- price is stored as whole MAD, interpreted per price_type
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, Text

from tour_booking.db.base import Base, TimestampMixin


class Activity(Base, TimestampMixin):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    image = Column(String(500), nullable=False)
    featured = Column(Boolean, nullable=False, default=True)
    available = Column(Boolean, nullable=False, default=True)
    get_your_guide_price = Column(Integer, nullable=True)
    duration_hours = Column(Integer, nullable=True)
    includes_food = Column(Boolean, nullable=False, default=False)
    includes_transportation = Column(Boolean, nullable=False, default=False)
    max_group_size = Column(Integer, nullable=True)
    price_type = Column(String(20), nullable=False, default="per_person")  # fixed, per_person
    created_by = Column(String(100), nullable=True)

    __table_args__ = (
        CheckConstraint("price > 0", name="check_activity_price_positive"),
        CheckConstraint(
            "max_group_size IS NULL OR max_group_size > 0",
            name="check_activity_max_group_size_positive",
        ),
        CheckConstraint("price_type IN ('fixed', 'per_person')", name="check_activity_price_type"),
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, title={self.title}, max_group_size={self.max_group_size})>"
