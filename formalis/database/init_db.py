"""
Initialisation de la base de données Formalis.
Crée les tables, une organisation de démonstration, son administrateur
et les fonctions prédéfinies.
"""

import logging
import sys
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.api.v1.fonctions.services import seed_default_fonctions
from formalis.core.auth.tenant_resolver import invalidate_all_memberships, invalidate_membership
from formalis.core.logging import configure_logging
from formalis.database.session import db_session, engine
from formalis.models import Base, Organisation, Utilisateur
from formalis.models.enums import UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# 1. CRÉATION DES TABLES
# =============================================================================

def create_all_tables() -> bool:
    """
    Crée toutes les tables de la base de données.

    Returns:
        True si succès, False sinon
    """
    try:
        logger.info("📦 Création des tables...")
        Base.metadata.create_all(bind=engine)

        table_names = list(Base.metadata.tables.keys())
        logger.info(f"✅ {len(table_names)} tables créées : {', '.join(sorted(table_names))}")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur lors de la création des tables : {e}")
        return False


def drop_all_tables() -> bool:
    """
    Supprime toutes les tables de la base de données.

    ⚠️ ATTENTION : Cette action est irréversible !
    """
    try:
        logger.warning("❗️ Suppression de toutes les tables...")
        Base.metadata.drop_all(bind=engine)
        logger.info("✅ Toutes les tables ont été supprimées")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur lors de la suppression des tables : {e}")
        return False


# =============================================================================
# 2. ORGANISATION DE DÉMONSTRATION
# =============================================================================

def init_demo_organisation(db: Session, slug: str = "demo") -> Organisation:
    """Retourne l'organisation `slug`, créée si besoin."""
    organisation = db.execute(
        select(Organisation).where(Organisation.slug == slug)
    ).scalar_one_or_none()

    if organisation:
        logger.info(f"   ℹ️ Organisation '{slug}' existe déjà")
        return organisation

    organisation = Organisation(nom="Organisme de démonstration", slug=slug)
    db.add(organisation)
    db.flush()
    logger.info(f"   ✅ Organisation '{slug}' créée ({organisation.id})")
    return organisation


def init_admin_user(
        db: Session,
        organisation: Organisation,
        email: str,
        user_id: Optional[uuid.UUID] = None,
) -> Utilisateur:
    """
    Crée l'administrateur de l'organisation.

    L'identifiant doit être celui du compte chez le fournisseur
    d'authentification (claim `sub`) ; à défaut un UUID est généré.
    """
    admin = db.execute(
        select(Utilisateur).where(
            Utilisateur.organisation_id == organisation.id,
            Utilisateur.email == email,
        )
    ).scalar_one_or_none()

    if admin:
        logger.info(f"   ℹ️ Administrateur {email} existe déjà")
        return admin

    admin = Utilisateur(
        id=user_id or uuid.uuid4(),
        organisation_id=organisation.id,
        email=email,
        prenom="Admin",
        nom="Formalis",
        role=UserRole.ADMIN.value,
    )
    db.add(admin)
    db.flush()
    logger.info(f"   ✅ Administrateur {email} créé ({admin.id})")
    return admin


# =============================================================================
# 3. ORCHESTRATION
# =============================================================================

def init_database(drop_existing: bool = False, admin_email: str = "admin@formalis.fr",
                  admin_id: Optional[uuid.UUID] = None) -> bool:
    """
    Initialise complètement la base.

    Returns:
        True si succès, False sinon
    """
    logger.info("🚀 Initialisation de la base Formalis")

    if drop_existing:
        if not drop_all_tables():
            return False
        invalidate_all_memberships()
    if not create_all_tables():
        return False

    try:
        with db_session() as db:
            organisation = init_demo_organisation(db)
            admin = init_admin_user(db, organisation, admin_email, admin_id)
            organisation_id, admin_user_id = organisation.id, admin.id
        invalidate_membership(admin_user_id)

        with db_session() as db:
            seed_default_fonctions(db, organisation_id)
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur lors de l'initialisation : {e}")
        return False

    logger.info("🎉 Base initialisée")
    return True


# =============================================================================
# 4. POINT D'ENTRÉE CLI
# =============================================================================

def main():
    """
    Point d'entrée pour exécution en ligne de commande.

    Usage:
        python -m formalis.database.init_db
        python -m formalis.database.init_db --drop
    """
    import argparse

    parser = argparse.ArgumentParser(description="Initialise la base de données Formalis")
    parser.add_argument(
        '--drop',
        action='store_true',
        help="Supprime les tables existantes avant création (ATTENTION !)"
    )
    parser.add_argument(
        '--admin-email',
        default="admin@formalis.fr",
        help="Email de l'administrateur (défaut: admin@formalis.fr)"
    )
    parser.add_argument(
        '--admin-id',
        type=uuid.UUID,
        default=None,
        help="Identifiant du compte administrateur chez le fournisseur d'authentification"
    )

    args = parser.parse_args()
    configure_logging()

    if args.drop:
        print("\n⚠️  ATTENTION : Vous allez SUPPRIMER toutes les tables existantes !")
        response = input("Êtes-vous sûr ? (oui/non) : ")
        if response.lower() != 'oui':
            print("Annulé.")
            sys.exit(0)

    success = init_database(
        drop_existing=args.drop,
        admin_email=args.admin_email,
        admin_id=args.admin_id,
    )
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
