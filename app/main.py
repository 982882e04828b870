"""
Akôm - FastAPI Backend Application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from app.config import settings
from app.errors import ServiceError
from app.api import (
    auth,
    tenants,
    tables,
    categories,
    menu,
    orders,
    stocks,
    warehouse,
    subscription,
    public,
    support,
    superadmin,
    cron,
    stats,
    cash,
)
from app.webhooks import ebilling

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Akôm API", version="1.0.0")
    yield
    logger.info("Shutting down Akôm API")


# Create FastAPI application
app = FastAPI(
    title="Akôm",
    description="Multi-tenant ordering, stock and subscription platform for restaurants",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Domain errors become {"error": ..., "message": ...} bodies"""
    logger.warning(
        "Request rejected",
        path=request.url.path,
        error=exc.message,
        detail=exc.detail,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Erreur serveur"})


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    from app.database import SessionLocal

    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tenants.router, prefix="/restaurants", tags=["Restaurants"])
app.include_router(tables.router, prefix="/restaurants/{restaurant_id}/tables", tags=["Tables"])
app.include_router(categories.router, prefix="/restaurants/{restaurant_id}/categories", tags=["Menu"])
app.include_router(menu.router, prefix="/restaurants/{restaurant_id}/products", tags=["Menu"])
app.include_router(orders.router, prefix="/restaurants/{restaurant_id}/orders", tags=["Orders"])
app.include_router(stocks.router, prefix="/restaurants/{restaurant_id}/stocks", tags=["Stock"])
app.include_router(warehouse.router, prefix="/restaurants/{restaurant_id}/warehouse", tags=["Stock"])
app.include_router(subscription.router, prefix="/restaurants/{restaurant_id}/subscription", tags=["Subscription"])
app.include_router(stats.router, prefix="/restaurants/{restaurant_id}/stats", tags=["Stats"])
app.include_router(cash.router, prefix="/restaurants/{restaurant_id}/cash", tags=["Cash"])
app.include_router(public.router, prefix="/public", tags=["Public"])
app.include_router(support.router, prefix="/support", tags=["Support"])
app.include_router(superadmin.router, prefix="/superadmin", tags=["Superadmin"])
app.include_router(cron.router, prefix="/cron", tags=["Cron"])

# Include webhook routers
app.include_router(ebilling.router, prefix="/webhooks/ebilling", tags=["Webhooks"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
