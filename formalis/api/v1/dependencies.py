# formalis/api/v1/dependencies.py
"""
Dépendances générales de l'API v1.

- PaginationParams : numéro de page (taille fixe de 25)

Pour la résolution du tenant, voir :
    formalis/core/auth/tenant_resolver.py
"""

from typing import Annotated

from fastapi import Depends, Query

from formalis.services.query import PAGE_SIZE, PageRequest


class PaginationParams:
    """
    Paramètre de pagination des routes de liste.

    Usage:
        @router.get("/salles")
        def list_salles(pagination: PaginationParams = Depends()):
            # pagination.page, pagination.request
            ...
    """

    def __init__(
            self,
            page: Annotated[int, Query(description="Numéro de page (commence à 1)")] = 1,
    ):
        # Une page < 1 est ramenée à 1 plutôt que refusée
        self.page = max(page, 1)
        self.size = PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    @property
    def request(self) -> PageRequest:
        return PageRequest(page=self.page, page_size=self.size)


# =============================================================================
# TYPE ALIASES
# =============================================================================

Pagination = Annotated[PaginationParams, Depends()]
