"""
Formalis - Application principale FastAPI
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from formalis.api.v1 import api_router
from formalis.core.config import settings
from formalis.core.logging import configure_logging
from formalis.core.redis_client import RedisClient

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Fermer le pool Redis à l'arrêt
    RedisClient.close()


# Créer l'application FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    description="Back-office et extranet des organismes de formation",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Configuration CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Inclure les routes API v1
app.include_router(api_router)

# Pièces jointes servies depuis le stockage local
if settings.UPLOAD_BASE_URL.startswith("/"):
    app.mount(
        settings.UPLOAD_BASE_URL,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )


@app.get("/")
async def root():
    """Page d'accueil"""
    return {
        "app": settings.APP_NAME,
        "status": "running",
        "environment": settings.ENVIRONMENT,
    }
