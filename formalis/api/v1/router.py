"""
Router principal API v1.

Agrège tous les routers des différents modules métier.

Usage dans main.py:
    from formalis.api.v1.router import api_router

    app = FastAPI(title="Formalis API")
    app.include_router(api_router)
"""
from fastapi import APIRouter

from .activites import router as activites_router
from .auth import router as auth_router
from .entreprises import router as entreprises_router
from .extranet import router as extranet_router
from .fonctions import router as fonctions_router
from .health import router as health_router
from .historique import router as historique_router
from .salles import router as salles_router
from .tickets import router as tickets_router


# =============================================================================
# ROUTER PRINCIPAL
# =============================================================================

api_router = APIRouter(prefix="/api/v1")


api_router.include_router(auth_router)
api_router.include_router(historique_router)
api_router.include_router(activites_router)
api_router.include_router(entreprises_router)
api_router.include_router(salles_router)
api_router.include_router(fonctions_router)
api_router.include_router(tickets_router)
api_router.include_router(extranet_router)


# =============================================================================
# HEALTH CHECK
# =============================================================================

api_router.include_router(health_router)
