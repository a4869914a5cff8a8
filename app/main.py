from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, OperationalError, DBAPIError
from app.config import settings
from app.database.connection import close_db, engine
from app.controllers.auth_controller import router as auth_router
from app.controllers.user_controller import router as user_router
from app.controllers.admin_controller import router as admin_router
from app.controllers.property_controller import router as property_router, listing_router
from app.controllers.offer_controller import router as offer_router
from app.controllers.review_controller import router as review_router
from app.utils.errors import MarketplaceError, Unauthenticated, InvalidInput, Internal, ServiceUnavailable
import asyncio
import logging
import time

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests"""
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        auth_header = request.headers.get("authorization")
        auth_preview = None
        if auth_header:
            auth_preview = auth_header[:20] + "..." if len(auth_header) > 20 else auth_header

        logger.info(f"Request: {request.method} {request.url.path} from {client_ip} (auth={auth_preview})")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {response.status_code} for {request.method} {request.url.path} ({process_time:.3f}s)")

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Test database connection on startup (non-blocking - don't fail startup)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
    except Exception as e:
        logger.warning(f"Database connection failed on startup: {str(e)}")
        logger.warning("App will continue, but database-dependent features may not work")

    if not settings.TOKEN_ISSUER_KEY:
        logger.warning("TOKEN_ISSUER_KEY is not set: POST /jwt will sign tokens for any email")

    yield

    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}")


app = FastAPI(
    title="Property Marketplace API",
    description="Listings, offers and sale settlement for buyers, agents and admins",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed request fields map to InvalidInput
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "body"
        problems.append(f"{field}: {error.get('msg')}")
    err = InvalidInput("Invalid request: " + "; ".join(problems))
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(asyncio.TimeoutError)
async def timeout_error_handler(request: Request, exc: asyncio.TimeoutError):
    logger.error(f"Datastore timeout on {request.method} {request.url.path}", exc_info=exc)
    err = ServiceUnavailable()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(SQLAlchemyError)
async def datastore_error_handler(request: Request, exc: SQLAlchemyError):
    # Internals are logged, never returned to the caller
    logger.error(f"Datastore error on {request.method} {request.url.path}", exc_info=exc)
    if isinstance(exc, OperationalError) or (isinstance(exc, DBAPIError) and exc.connection_invalidated):
        err = ServiceUnavailable()
    else:
        err = Internal()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(admin_router)
app.include_router(property_router)
app.include_router(listing_router)
app.include_router(offer_router)
app.include_router(review_router)


@app.get("/")
async def root():
    return {"message": "Property Marketplace API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
