"""FastAPI application entry point."""
from __future__ import annotations
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from masterygate.api import progress
from masterygate.core import config
from masterygate.persistence.db import init_db

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ------------------------------------------------------------------
# App creation
# ------------------------------------------------------------------
app = FastAPI(
    title="MasteryGate API",
    description="Mastery-gated concept progress for adaptive courses",
    version="1.0.0",
)

# CORS — allow everything for local dev (restrict for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------
# Startup: initialise DB schema
# ------------------------------------------------------------------
@app.on_event("startup")
def on_startup():
    init_db()


# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------
app.include_router(progress.router)
