"""PriceTrack - FastAPI Backend"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pricetrack.api import health, prices, products, purchases, supermarkets
from pricetrack.core.config import settings
from pricetrack.core.database import engine
from pricetrack.core.errors import PriceTrackError
from pricetrack.core.logging_conf import setup_logging
from pricetrack.core.rate_limit import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)

    # Startup - initialize database
    from pricetrack.core.database import init_db
    await init_db()

    # Seed sample data
    if settings.SEED_DEMO_DATA:
        from pricetrack.services.seed_service import seed_data
        await seed_data()

    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="PriceTrack API",
    description="Grocery purchases and community-reported prices",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


@app.exception_handler(PriceTrackError)
async def handle_app_error(request: Request, exc: PriceTrackError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part not in ("body", "path", "query"))
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return error_response(400, "Invalid request - " + "; ".join(problems))


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(500, "Error reading from the database")


@app.exception_handler(RateLimitExceeded)
def handle_rate_limit(request: Request, exc: RateLimitExceeded):
    return error_response(429, f"Too many requests: {exc.detail}")


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(purchases.router, prefix="/purchases", tags=["Purchases"])
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(supermarkets.router, prefix="/supermarkets", tags=["Supermarkets"])
app.include_router(prices.router, prefix="/prices", tags=["Prices"])
