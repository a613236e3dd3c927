import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from grammar_trainer.db import get_settings, verify_connection, close_client
from grammar_trainer.routers import (
    auth_router,
    cards_router,
    session_router,
    dashboard_router,
    leaderboard_router,
    seed_router,
)
from grammar_trainer.auth import get_auth_settings
from grammar_trainer.config import get_trainer_settings

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    auth_settings = get_auth_settings()
    trainer_settings = get_trainer_settings()

    # Log authentication configuration
    if auth_settings.enabled:
        if auth_settings.is_configured():
            print("✓ Session authentication enabled")
            print(f"  Cookie: {auth_settings.cookie_name}")
        else:
            print("⚠ Authentication enabled but not configured (SESSION_SECRET missing or shorter than 16 characters)")
    else:
        print("⚠ Authentication DISABLED - using X-User-Id header fallback (dev mode)")

    print(f"  Mastery model: {trainer_settings.mastery_model}")

    if settings.is_configured():
        if verify_connection():
            print("✓ Connected to Cosmos DB")
        else:
            print("✗ Failed to connect to Cosmos DB - check configuration")
    else:
        print("⚠ Cosmos DB not configured (COSMOS_ENDPOINT not set)")

    yield

    # Shutdown
    close_client()
    print("✓ Cosmos DB connection closed")


app = FastAPI(
    title="Grammar Trainer API",
    description="Multiplayer spaced-repetition grammar trainer",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(cards_router)
app.include_router(session_router)
app.include_router(dashboard_router)
app.include_router(leaderboard_router)
app.include_router(seed_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Grammar Trainer API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/api/health",
            "login": "/api/login",
            "session": "/api/session/start",
            "dashboard": "/api/dashboard",
            "leaderboard": "/api/leaderboard",
        },
    }


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/db-check")
async def db_check():
    """Report whether Cosmos DB is reachable."""
    if not get_settings().is_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cosmos DB not configured",
        )
    if not verify_connection():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cosmos DB unreachable",
        )
    return {"status": "ok"}
