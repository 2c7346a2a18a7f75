from formalis.services.query.builder import (
    PAGE_SIZE,
    FilterOp,
    FilterSpec,
    PageRequest,
    TenantQuery,
    day_end,
    day_start,
    paired_filters,
)
from formalis.services.query.mapper import (
    map_activite,
    map_historique_event,
    map_rows,
    map_ticket,
    to_schema,
)

__all__ = [
    "PAGE_SIZE",
    "FilterOp",
    "FilterSpec",
    "PageRequest",
    "TenantQuery",
    "day_end",
    "day_start",
    "paired_filters",
    "map_activite",
    "map_historique_event",
    "map_rows",
    "map_ticket",
    "to_schema",
]
