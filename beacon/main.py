import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beacon.api import root_router
from beacon.common.code import ErrCode
from beacon.configs import configs
from beacon.core.logger import LOGGING_CONFIG
from beacon.infra.database import create_db_and_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await create_db_and_tables()

    from beacon.core.notification import ensure_vapid_keys

    ensure_vapid_keys()
    logger.info(f"Beacon started (env={configs.Env})")

    yield

    from beacon.infra.database.connection import async_engine

    await async_engine.dispose()


app = FastAPI(
    title="Beacon FastAPI Service",
    description="Device tracking and push notification delivery",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are client errors (400), not 422."""
    messages = [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()]
    error = ErrCode.INVALID_REQUEST.with_messages("Invalid request", *messages)
    return JSONResponse(status_code=400, content={"detail": error.as_dict()})


app.include_router(root_router)


if __name__ == "__main__":
    uvicorn.run(
        "beacon.main:app",
        host=configs.Host,
        port=configs.Port,
        log_config=LOGGING_CONFIG,
        reload=configs.Debug,
        reload_excludes=["tests"],
    )
