from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nfpachem.core.config import settings
from nfpachem.modules.chemicals.database import DatabaseAggregator
from nfpachem.modules.chemicals.router import router as chemicals_router
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.dedup import Deduplicator
from nfpachem.modules.identifiers.router import router as identifiers_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting NFPA Chemical ID API")
    app.state.aggregator = DatabaseAggregator.from_files(settings.database_files)
    app.state.consensus = ConsensusResolver.from_settings()
    app.state.deduplicator = Deduplicator(app.state.consensus)
    logger.info(
        "databases_loaded",
        databases=len(app.state.aggregator.databases),
        records=len(app.state.aggregator),
    )
    yield
    await app.state.consensus.aclose()
    logger.info("Shutting down NFPA Chemical ID API")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(chemicals_router, prefix=settings.api_prefix)
app.include_router(identifiers_router, prefix=settings.api_prefix)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
