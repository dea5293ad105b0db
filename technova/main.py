from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from technova.core.config import settings
from technova.core.errors import AuthorizationError, TransientIOError, ValidationError
from technova.core.http_client import catalog_client
from technova.dependencies import event_store
from technova.routers import admin, cart, categories, health, interactions, products, recommendations, users

logger = logging.getLogger("technova")
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s: %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        await event_store.ensure_indexes()
    except TransientIOError as e:
        logger.warning("[startup] Event store indexes not created: %s", e)
    logger.info("[startup] TechNova engine is up; catalog: %s", catalog_client.base_url)

    yield

    await catalog_client.aclose()

app = FastAPI(
    title="TechNova Recommendation & Analytics Service",
    version="0.3.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(TransientIOError)
async def transient_io_error_handler(request: Request, exc: TransientIOError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Upstream service unavailable"})


app.include_router(health.router)
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(cart.router)
app.include_router(interactions.router)
app.include_router(recommendations.router)
app.include_router(admin.router)
app.include_router(users.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("technova.main:app", host="127.0.0.1", port=settings.port, reload=True)
