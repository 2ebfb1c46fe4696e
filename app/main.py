import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.api.v1 import v1_router
from app.api.v1.envelope import error
from app.config.settings import settings
from app.core.db import engine
from app.core.errors import BillingError
from app.core.logging_config import setup_logging
from app.infrastructure.db import models  # noqa: F401  (register tables on Base.metadata)
from app.infrastructure.db.base import Base

setup_logging()
logger = logging.getLogger("main")

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENVIRONMENT)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error(exc.message, exc.errors or None))


app.include_router(api_router)
app.include_router(v1_router)
