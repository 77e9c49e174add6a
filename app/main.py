import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from supabase import PostgrestAPIError

from app.config import settings
from app.core.errors import to_http_exception
from app.core.middleware import SecurityHeadersMiddleware
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.tutorials import routes as tutorials_routes
from app.modules.likes import routes as likes_routes
from app.modules.comments import routes as comments_routes
from app.modules.enrollments import routes as enrollments_routes
from app.modules.media import routes as media_routes

API_PREFIX = "/api/v1"

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    description="Tutorial publishing and learning API backed by Supabase",
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(PostgrestAPIError)
async def postgrest_exception_handler(request: Request, exc: PostgrestAPIError):
    # Services translate their own errors; this catches any query that escaped them
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module_routes in (
    auth_routes,
    profiles_routes,
    tutorials_routes,
    likes_routes,
    comments_routes,
    enrollments_routes,
    media_routes,
):
    app.include_router(module_routes.router, prefix=API_PREFIX)


def missing_configuration():
    return [name for name in ("supabase_url", "supabase_key") if not getattr(settings, name)]


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment}), media bucket '{settings.media_bucket}'")
    missing = missing_configuration()
    if missing:
        logger.warning(f"Missing configuration: {', '.join(n.upper() for n in missing)}; data endpoints will fail")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.app_name} shutting down")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: 503 until the Supabase connection settings are present"""
    missing = missing_configuration()
    if missing:
        return JSONResponse(status_code=503, content={"status": "not ready", "missing": missing})
    return {"status": "ready"}
