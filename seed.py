import asyncio
import logging
from app.core.config import settings, setup_logging
from app.core.database import init_db, close_db
from app.core.security import get_password_hash
from app.models.user import User, UserRole
from app.services.stores import BeanieCategoryStore

logger = logging.getLogger("seed")

DEFAULT_CATEGORIES = [
    "Beverages",
    "Dairy",
    "Snacks",
    "Groceries",
    "Household",
    "Personal Care",
    "Other",
]


async def seed_admin():
    admin_email = settings.ADMIN_EMAIL or "admin@supermarket.com"
    admin_pass = settings.ADMIN_PASSWORD or "admin123"

    existing_admin = await User.find_one(User.email == admin_email)
    if existing_admin:
        logger.info("Admin '%s' already exists, re-creating it", admin_email)
        await existing_admin.delete()

    await User(
        email=admin_email,
        first_name="System",
        last_name="Admin",
        hashed_password=get_password_hash(admin_pass),
        role=UserRole.ADMIN,
        is_active=True
    ).insert()
    logger.info("Admin user created: %s", admin_email)


async def seed_categories():
    store = BeanieCategoryStore()
    if await store.list():
        logger.info("Categories already present, skipping defaults")
        return
    for name in DEFAULT_CATEGORIES:
        await store.create(name)
    logger.info("Created %d default categories", len(DEFAULT_CATEGORIES))


async def seed_data():
    logger.info("Connecting to DB: %s...", settings.DATABASE_NAME)
    await init_db()
    try:
        await seed_admin()
        await seed_categories()
    finally:
        close_db()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_data())
