# canteen/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from canteen.core.config import get_settings
from canteen.database import create_db_and_tables, engine
from canteen.seed import seed_demo_data
from canteen.services.cart_service import build_cart_sessions

# Import models so SQLModel metadata is populated before create_all()
from canteen.models import user as _user_models  # noqa: F401
from canteen.models import menu as _menu_models  # noqa: F401
from canteen.models import cart as _cart_models  # noqa: F401
from canteen.models import order as _order_models  # noqa: F401
from canteen.models import wallet as _wallet_models  # noqa: F401
from canteen.models import staff as _staff_models  # noqa: F401
from canteen.models import credit as _credit_models  # noqa: F401


# Routers
from canteen.routers.auth import router as auth_router
from canteen.routers.users import router as users_router
from canteen.routers.menu import router as menu_router
from canteen.routers.cart import router as cart_router
from canteen.routers.orders import router as orders_router
from canteen.routers.wallet import router as wallet_router
from canteen.routers.admin_menu import router as admin_menu_router
from canteen.routers.admin_stats import router as admin_stats_router
from canteen.routers.admin_wallets import router as admin_wallets_router
from canteen.routers.admin_staff import router as admin_staff_router
from canteen.routers.admin_credit import router as admin_credit_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create tables and load the demo catalog when enabled.
      - Start the per-user cart sessions and their save queue.

    Shutdown:
      - Flush pending cart saves before the process exits.
    """
    logger.info("Startup: connecting to %s", engine.url.get_backend_name())
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise

    if settings.SEED_DEMO_DATA:
        seed_demo_data(engine)

    app.state.cart_sessions = build_cart_sessions(settings, engine)
    yield

    logger.info("Shutdown: flushing cart saves...")
    app.state.cart_sessions.shutdown()


app = FastAPI(
    title=settings.PROJECT_NAME or "Underground Canteen API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(menu_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(wallet_router, prefix=settings.API_V1_STR)
app.include_router(admin_menu_router, prefix=settings.API_V1_STR)
app.include_router(admin_stats_router, prefix=settings.API_V1_STR)
app.include_router(admin_wallets_router, prefix=settings.API_V1_STR)
app.include_router(admin_staff_router, prefix=settings.API_V1_STR)
app.include_router(admin_credit_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "canteen-backend"}
