"""
Types SQLAlchemy personnalisés pour Formalis.

Ce module définit des types compatibles SQLite (tests) et PostgreSQL (production).
"""

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import JSONB


# ============================================================================
# JSONBCompatible - Type JSON compatible multi-dialecte
# ============================================================================
#
# - Sur PostgreSQL : JSONB (indexable, opérateurs @>, ?)
# - Sur SQLite/autres : JSON standard
#
# Usage dans les modèles:
#     metadata_: Mapped[dict] = mapped_column(JSONBCompatible, default=dict)
#
# ============================================================================

JSONBCompatible = JSON().with_variant(JSONB(astext_type=Text()), 'postgresql')

# Métadonnées libres (historique, emails)
JSONMetadata = JSONBCompatible

# Personnalisation visuelle d'une organisation
JSONTheme = JSONBCompatible
