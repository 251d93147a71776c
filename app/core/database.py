import logging
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from app.core.config import settings
from app.models.user import User
from app.models.category import Category
from app.models.product import Product
from app.models.settings import OperatorSettings

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient | None = None


async def init_db():
    """Connect to MongoDB and initialize Beanie"""
    global client

    # UUIDs must round-trip as uuid.UUID, also through change streams
    client = AsyncIOMotorClient(settings.MONGODB_URL, uuidRepresentation="standard")

    await init_beanie(
        database=client[settings.DATABASE_NAME],
        document_models=[User, Category, Product, OperatorSettings]
    )

    logger.info("Beanie initialized with database: %s", settings.DATABASE_NAME)
    return client[settings.DATABASE_NAME]


def close_db():
    global client
    if client is not None:
        client.close()
        client = None
