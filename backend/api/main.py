"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.errors import register_error_handlers
from api.routes import auth, gemini, geoapify, places, wishlist
from db import init_db
from settings import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Create app
app = FastAPI(
    title="Tourism Places API",
    description="Curated places, wishlists, Geoapify search and a Gemini travel assistant",
    version=API_VERSION,
)

# CORS middleware for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(places.router, prefix="/places", tags=["places"])
app.include_router(wishlist.router, prefix="/wishlist", tags=["wishlist"])
app.include_router(geoapify.router, prefix="/geoapify", tags=["geoapify"])
app.include_router(gemini.router, prefix="/gemini", tags=["gemini"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    init_db()
    missing = [
        name
        for name, value in (
            ("JWT_SECRET", settings.JWT_SECRET),
            ("GEOAPIFY_API_KEY", settings.GEOAPIFY_API_KEY),
            ("GEMINI_API_KEY", settings.GEMINI_API_KEY),
        )
        if not value
    ]
    if missing:
        logger.warning("Missing configuration: %s", ", ".join(missing))


@app.get("/")
async def root():
    """Service status, endpoint index and which API keys are configured."""
    return {
        "message": "Tourism Places API Server",
        "status": "running",
        "version": API_VERSION,
        "endpoints": {
            "auth": "/auth",
            "places": "/places",
            "wishlist": "/wishlist",
            "geoapify": "/geoapify",
            "gemini": "/gemini",
        },
        "apiKeys": {
            "jwt": bool(settings.JWT_SECRET),
            "google": bool(settings.GOOGLE_CLIENT_ID),
            "geoapify": bool(settings.GEOAPIFY_API_KEY),
            "gemini": bool(settings.GEMINI_API_KEY),
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
