import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.responses import Response

from shopdesk.core.config import settings
from shopdesk.routers import notifications, orders, products, tax_entries

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {
        "name": "Notifications",
        "description": "Deduplicated stock, GST and payment alerts with a live event stream.",
    },
    {"name": "Products", "description": "Manage products and adjust stock levels."},
    {"name": "Orders", "description": "Manage bills and their payment status."},
    {"name": "Tax Entries", "description": "Manage GST tax entries and their filing status."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Retail point-of-sale back office API. "
        "Manage products, orders and GST entries, and follow the alerts they raise."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count", "X-Alert-Errors"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Database temporarily unavailable"},
        headers={"Retry-After": "5"},
    )


app.include_router(
    notifications.router,
    prefix="/v1/notifications",
    tags=["Notifications"],
)
app.include_router(products.router, prefix="/v1/products", tags=["Products"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])
app.include_router(tax_entries.router, prefix="/v1/tax_entries", tags=["Tax Entries"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
