"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from tour_booking.api.routes import activities, admin, auth, availability, bookings, capacity, crm

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(activities.router)
api_router.include_router(bookings.router)
api_router.include_router(capacity.router)
api_router.include_router(availability.router)
api_router.include_router(admin.router)
api_router.include_router(crm.router)
