"""Database seeding helpers."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from console.core.config import settings
from console.models.menu import MenuItem

logger = logging.getLogger(__name__)

DEMO_MENU: list[tuple[str, str, str]] = [
    ("Gyros", "Mains", "16.50"),
    ("Souvlaki", "Mains", "17.50"),
    ("Moussaka", "Mains", "18.00"),
    ("Tzatziki", "Starters", "6.50"),
    ("Greek Salad", "Starters", "8.50"),
    ("Baklava", "Desserts", "6.00"),
]


def ensure_seed_menu(session: Session) -> bool:
    """Insert a demo catalog into an empty menu when seeding is enabled."""
    if not settings.seed_menu:
        return False

    existing = session.scalar(select(func.count(MenuItem.id)))
    if existing:
        return False

    session.add_all(
        [MenuItem(name=name, category=category, price=Decimal(price), is_active=True) for name, category, price in DEMO_MENU]
    )
    session.commit()
    logger.info("[BOOTSTRAP] Seeded %s demo menu items", len(DEMO_MENU))
    return True
