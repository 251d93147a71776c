import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.core.config import settings, setup_logging
from app.core.database import init_db, close_db
from app.core.email import mail_configured, send_low_stock_email
from app.services.change_feed import ChangeFeedListener, MongoChangeFeed
from app.services.notifications import StockAlertNotifier
from app.routers import auth, scan, product, category, history, settings as settings_router

setup_logging()
logger = logging.getLogger(__name__)


def start_change_feed(database):
    """Wire the change feed to the stock alert notifier; returns the unsubscribe."""
    notifier = StockAlertNotifier(
        recipient=settings.STOCK_ALERT_EMAIL,
        mailer=send_low_stock_email if mail_configured() else None,
    )
    listener = ChangeFeedListener(MongoChangeFeed(database))
    return listener.subscribe(notifier.on_product_change, notifier.on_category_change)


# ---------------------------------------------------------
# 1. LIFESPAN MANAGER
# ---------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- STARTUP ---
    logger.info("Initialization Started...")
    unsubscribe = lambda: None
    try:
        database = await init_db()
        logger.info("Connected to Database '%s'", settings.DATABASE_NAME)
        if settings.CHANGE_FEED_ENABLED:
            unsubscribe = start_change_feed(database)
    except Exception as e:
        logger.critical("Could not connect to Database: %s", e)

    yield

    # --- SHUTDOWN ---
    logger.info("System Shutting Down...")
    unsubscribe()
    close_db()

# ---------------------------------------------------------
# 2. APP INITIALIZATION
# ---------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    description="Barcode resolution and stock tracking API for supermarket operators"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------
# 3. ROUTERS
# ---------------------------------------------------------
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(scan.router, prefix="/scan", tags=["Barcode Scanning"])
app.include_router(product.router, prefix="/products", tags=["Product Management"])
app.include_router(category.router, prefix="/categories", tags=["Category Management"])
app.include_router(history.router, prefix="/history", tags=["Scan History"])
app.include_router(settings_router.router, prefix="/settings", tags=["Settings"])

@app.get("/", tags=["System"])
def root():
    return {"system": settings.APP_NAME, "status": "Online", "documentation": "/docs"}

@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}
