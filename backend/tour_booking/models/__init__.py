from tour_booking.models.activity import Activity
from tour_booking.models.audit_log import AuditLog
from tour_booking.models.booking import BOOKING_STATUSES, Booking
from tour_booking.models.user import AdminUser

__all__ = ["Activity", "AdminUser", "AuditLog", "Booking", "BOOKING_STATUSES"]
