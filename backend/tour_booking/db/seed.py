"""
Startup data: the agency's default tours and the bootstrap superadmin.
"""

from tour_booking.core.config import Settings
from tour_booking.core.logging import get_logger
from tour_booking.repositories.base import RepositoryProvider
from tour_booking.services.auth_service import ensure_bootstrap_admin

logger = get_logger(__name__)

DEFAULT_ACTIVITIES = [
    {
        "title": "Montgolfière (Hot Air Balloon)",
        "description": (
            "Experience the breathtaking views of Marrakech and the Atlas Mountains from a "
            "hot air balloon at sunrise. Float peacefully above the stunning Moroccan "
            "landscape as the sun begins to illuminate the desert and mountains."
        ),
        "price": 1100,
        "image": "/attached_assets/montgolfiere-marrakech.jpg",
        "featured": True,
        "available": False,
        "max_group_size": 8,
    },
    {
        "title": "Agafay Combo",
        "description": (
            "Discover the stone desert of Agafay with camel rides, quad biking, and authentic "
            "Berber dinner under the stars. Experience the Moroccan desert lifestyle and enjoy "
            "breathtaking views of the Atlas mountains."
        ),
        "price": 450,
        "image": "/attached_assets/agafaypack.jpeg",
        "featured": True,
        "max_group_size": 15,
    },
    {
        "title": "Essaouira Day Trip",
        "description": (
            "Visit the charming coastal town of Essaouira with its blue-painted seaside "
            "buildings, historic medina, and beautiful beaches. Experience the unique "
            "atmosphere of this UNESCO World Heritage site."
        ),
        "price": 200,
        "image": "/attached_assets/Essaouira day trip 4.jpg",
        "featured": True,
        "max_group_size": 20,
    },
    {
        "title": "Ouzoud Waterfalls Day Trip",
        "description": (
            "Explore the stunning Ouzoud Waterfalls, one of Morocco's most spectacular natural "
            "wonders with cascading waterfalls and lush green landscapes. Spot wild Barbary "
            "macaque monkeys and enjoy breathtaking viewpoints throughout this scenic day trip."
        ),
        "price": 200,
        "image": "/attached_assets/Ouzoud-Waterfalls.jpg",
        "featured": True,
        "max_group_size": 16,
    },
    {
        "title": "Ourika Valley Day Trip",
        "description": (
            "Journey to the beautiful Ourika Valley with its crystal-clear streams, snow-capped "
            "Atlas Mountains, and authentic Berber villages. Experience the local culture, enjoy "
            "scenic views, and connect with nature in this verdant paradise."
        ),
        "price": 150,
        "image": "/attached_assets/ourika-valley-marrakech.jpg",
        "featured": True,
        "max_group_size": 24,
    },
]


async def seed_initial_data(provider: RepositoryProvider, settings: Settings) -> None:
    async with provider.unit_of_work() as repos:
        await ensure_bootstrap_admin(repos, settings)

        if settings.SEED_DEFAULT_ACTIVITIES and await repos.activities.count() == 0:
            for data in DEFAULT_ACTIVITIES:
                await repos.activities.create(dict(data))
            logger.info("default_activities_seeded", count=len(DEFAULT_ACTIVITIES))
