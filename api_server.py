from __future__ import annotations  # FastAPI server exposing the mock-interview orchestrator

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from services.runtime import get_sweeper


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:  # Run the expiry sweeper for the app lifetime
    sweeper = get_sweeper()
    sweeper.start()
    logger.info("Session expiry sweeper started")
    try:
        yield
    finally:
        sweeper.stop()
        logger.info("Session expiry sweeper stopped")


app = FastAPI(title="Mock Interview API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
