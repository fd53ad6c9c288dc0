import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from connectvida.config import settings
from connectvida.modules.auth import routes as auth_routes
from connectvida.modules.churches import routes as churches_routes
from connectvida.modules.members import routes as members_routes
from connectvida.modules.ministries import routes as ministries_routes
from connectvida.modules.events import routes as events_routes
from connectvida.modules.devotionals import routes as devotionals_routes
from connectvida.modules.schools import routes as schools_routes
from connectvida.modules.journeys import routes as journeys_routes
from connectvida.modules.courses import routes as courses_routes
from connectvida.modules.growth_groups import routes as growth_groups_routes
from connectvida.modules.vocational_tests import routes as vocational_tests_routes
from connectvida.modules.kids import routes as kids_routes
from connectvida.modules.finance import routes as finance_routes
from connectvida.modules.billing import routes as billing_routes
from connectvida.modules.notifications import routes as notifications_routes
from connectvida.modules.whatsapp import routes as whatsapp_routes
from connectvida.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


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
    churches_routes,
    members_routes,
    ministries_routes,
    events_routes,
    devotionals_routes,
    schools_routes,
    journeys_routes,
    courses_routes,
    growth_groups_routes,
    vocational_tests_routes,
    kids_routes,
    finance_routes,
    billing_routes,
    notifications_routes,
    whatsapp_routes,
    admin_routes,
):
    app.include_router(module_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment})")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; auth admin operations will fail")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to connectvida-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check: Supabase must be configured."""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready", "detail": "Supabase not configured"})
    return {"status": "ready"}
