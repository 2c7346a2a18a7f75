"""initial_schema

Revision ID: 5a1f0c2e9b74
Revises:
Create Date: 2026-01-05 09:00:00+00:00

Schéma initial Formalis :
1. Organisations, utilisateurs et compteurs de numéros
2. Référentiels (salles, fonctions) et CRM (entreprises)
3. Extranet, tickets, journal des emails
4. Historique et activités
5. Row-Level Security sur les tables portant organisation_id

IMPORTANT: La partie RLS nécessite PostgreSQL 9.5+
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5a1f0c2e9b74'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# =============================================================================
# CONFIGURATION - Tables isolées par organisation
# =============================================================================

TABLES_WITH_ORGANISATION_ID = [
    'utilisateurs',
    'salles',
    'fonctions_predefinies',
    'entreprises',
    'extranet_acces',
    'tickets',
    'emails_envoyes',
    'historique_events',
    'activites',
]


# =============================================================================
# HELPERS
# =============================================================================

def json_type():
    return sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def id_column() -> sa.Column:
    return sa.Column('id', sa.Uuid(), primary_key=True)


def organisation_column() -> sa.Column:
    return sa.Column(
        'organisation_id',
        sa.Uuid(),
        sa.ForeignKey('organisations.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
        comment='Organisation propriétaire de cet enregistrement',
    )


def timestamp_columns() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def is_postgresql() -> bool:
    return op.get_bind().dialect.name == 'postgresql'


# =============================================================================
# UPGRADE
# =============================================================================

def upgrade() -> None:
    # =========================================================================
    # 1. Organisation
    # =========================================================================

    op.create_table(
        'organisations',
        id_column(),
        sa.Column('nom', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('theme', json_type(), nullable=True),
        sa.Column('actif', sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamp_columns(),
        comment='Organismes de formation (tenants)',
    )

    op.create_table(
        'utilisateurs',
        id_column(),
        organisation_column(),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('prenom', sa.String(100), nullable=True),
        sa.Column('nom', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user', comment='admin | manager | user'),
        sa.Column('actif', sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamp_columns(),
        comment='Utilisateurs du back-office',
    )

    op.create_table(
        'sequences',
        sa.Column('organisation_id', sa.Uuid(), sa.ForeignKey('organisations.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('entite', sa.String(10), primary_key=True),
        sa.Column('compteur', sa.Integer(), nullable=False, server_default='0'),
        comment="Compteurs des numéros d'affichage (ENT-0001, TIC-0001)",
    )

    # =========================================================================
    # 2. Référentiels et CRM
    # =========================================================================

    op.create_table(
        'salles',
        id_column(),
        organisation_column(),
        sa.Column('nom', sa.String(255), nullable=False),
        sa.Column('adresse', sa.String(500), nullable=True),
        sa.Column('capacite', sa.Integer(), nullable=True),
        sa.Column('equipements', sa.Text(), nullable=True),
        sa.Column('actif', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *timestamp_columns(),
        comment='Salles de formation',
    )

    op.create_table(
        'fonctions_predefinies',
        id_column(),
        organisation_column(),
        sa.Column('nom', sa.String(100), nullable=False),
        sa.Column('ordre', sa.Integer(), nullable=False, server_default='0'),
        *timestamp_columns(),
        sa.UniqueConstraint('organisation_id', 'nom', name='uq_fonction_organisation_nom'),
        comment='Fonctions prédéfinies des contacts',
    )

    op.create_table(
        'entreprises',
        id_column(),
        organisation_column(),
        sa.Column('numero_affichage', sa.String(20), nullable=False),
        sa.Column('nom', sa.String(255), nullable=False, index=True),
        sa.Column('siret', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('telephone', sa.String(30), nullable=True),
        sa.Column('adresse', sa.String(500), nullable=True),
        sa.Column('code_postal', sa.String(10), nullable=True),
        sa.Column('ville', sa.String(100), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        *timestamp_columns(),
        sa.UniqueConstraint('organisation_id', 'numero_affichage', name='uq_entreprise_numero'),
        comment='Entreprises clientes',
    )

    # =========================================================================
    # 3. Extranet, support, communication
    # =========================================================================

    op.create_table(
        'extranet_acces',
        id_column(),
        organisation_column(),
        sa.Column('user_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('role', sa.String(30), nullable=False),
        sa.Column('entite_type', sa.String(30), nullable=False),
        sa.Column('entite_id', sa.Uuid(), nullable=False),
        sa.Column('statut', sa.String(20), nullable=False, server_default='invite', index=True),
        sa.Column('invite_token', sa.String(128), nullable=True, unique=True,
                  comment="Jeton d'invitation à usage unique"),
        sa.Column('invite_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('invite_le', sa.DateTime(timezone=True), nullable=True),
        sa.Column('active_le', sa.DateTime(timezone=True), nullable=True),
        *timestamp_columns(),
        sa.UniqueConstraint('organisation_id', 'entite_type', 'entite_id', name='uq_extranet_acces_entite'),
        comment='Accès extranet (formateurs, apprenants, contacts clients)',
    )

    op.create_table(
        'tickets',
        id_column(),
        organisation_column(),
        sa.Column('numero_affichage', sa.String(20), nullable=False),
        sa.Column('titre', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('statut', sa.String(20), nullable=False, server_default='ouvert', index=True),
        sa.Column('priorite', sa.String(20), nullable=False, server_default='normale'),
        sa.Column('categorie', sa.String(20), nullable=True),
        sa.Column('auteur_user_id', sa.Uuid(), nullable=True),
        sa.Column('auteur_nom', sa.String(255), nullable=True),
        sa.Column('auteur_email', sa.String(255), nullable=True),
        sa.Column('auteur_type', sa.String(30), nullable=False),
        sa.Column('entreprise_id', sa.Uuid(), sa.ForeignKey('entreprises.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assignee_id', sa.Uuid(), sa.ForeignKey('utilisateurs.id', ondelete='SET NULL'),
                  nullable=True, index=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        *timestamp_columns(),
        sa.UniqueConstraint('organisation_id', 'numero_affichage', name='uq_ticket_numero'),
        comment='Tickets de support',
    )

    op.create_table(
        'emails_envoyes',
        id_column(),
        organisation_column(),
        sa.Column('destinataire_email', sa.String(255), nullable=False),
        sa.Column('destinataire_nom', sa.String(255), nullable=True),
        sa.Column('sujet', sa.String(500), nullable=False),
        sa.Column('contenu_html', sa.Text(), nullable=True),
        sa.Column('statut', sa.String(20), nullable=False),
        sa.Column('provider_id', sa.String(100), nullable=True),
        sa.Column('entite_type', sa.String(30), nullable=True),
        sa.Column('entite_id', sa.Uuid(), nullable=True),
        sa.Column('template', sa.String(50), nullable=True),
        sa.Column('erreur', sa.Text(), nullable=True),
        sa.Column('metadata', json_type(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        comment='Journal des emails envoyés',
    )

    # =========================================================================
    # 4. Historique
    # =========================================================================

    op.create_table(
        'historique_events',
        id_column(),
        organisation_column(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('utilisateurs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_nom', sa.String(255), nullable=True),
        sa.Column('user_role', sa.String(30), nullable=True),
        sa.Column('origine', sa.String(20), nullable=False, server_default='backoffice'),
        sa.Column('module', sa.String(30), nullable=False, index=True),
        sa.Column('action', sa.String(30), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('entite_type', sa.String(30), nullable=False),
        sa.Column('entite_id', sa.Uuid(), nullable=False),
        sa.Column('entite_label', sa.String(255), nullable=True),
        sa.Column('entreprise_id', sa.Uuid(), nullable=True),
        sa.Column('objet_href', sa.String(255), nullable=True),
        sa.Column('metadata', json_type(), nullable=True),
        sa.Column('agence_id', sa.Uuid(), nullable=True),
        sa.Column('agence_nom', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
        comment="Journal d'activité (immuable)",
    )
    op.create_index('ix_historique_entite', 'historique_events', ['organisation_id', 'entite_type', 'entite_id'])
    op.create_index('ix_historique_entreprise', 'historique_events', ['organisation_id', 'entreprise_id'])

    op.create_table(
        'activites',
        id_column(),
        organisation_column(),
        sa.Column('auteur_id', sa.Uuid(), sa.ForeignKey('utilisateurs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('contenu', sa.Text(), nullable=False),
        sa.Column('entite_type', sa.String(30), nullable=True),
        sa.Column('entite_id', sa.Uuid(), nullable=True),
        *timestamp_columns(),
        comment='Activités et notes du back-office',
    )

    # =========================================================================
    # 5. Row-Level Security
    # =========================================================================

    if not is_postgresql():
        return

    op.execute("""
        CREATE OR REPLACE FUNCTION current_organisation_id()
        RETURNS UUID AS $$
        DECLARE
            org_str TEXT;
        BEGIN
            -- Définie par l'application via set_config('app.current_organisation_id', ...)
            org_str := current_setting('app.current_organisation_id', true);
            IF org_str IS NULL OR org_str = '' THEN
                RETURN NULL;
            END IF;
            RETURN org_str::UUID;
        EXCEPTION
            WHEN OTHERS THEN
                RETURN NULL;
        END;
        $$ LANGUAGE plpgsql STABLE;

        CREATE OR REPLACE FUNCTION rls_bypassed()
        RETURNS BOOLEAN AS $$
        BEGIN
            RETURN coalesce(current_setting('app.bypass_rls', true), '') = 'true';
        END;
        $$ LANGUAGE plpgsql STABLE;
    """)

    for table in TABLES_WITH_ORGANISATION_ID:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")
        op.execute(f"""
            CREATE POLICY {table}_organisation_isolation ON {table}
            USING (rls_bypassed() OR organisation_id = current_organisation_id())
            WITH CHECK (rls_bypassed() OR organisation_id = current_organisation_id())
        """)


# =============================================================================
# DOWNGRADE
# =============================================================================

def downgrade() -> None:
    if is_postgresql():
        for table in TABLES_WITH_ORGANISATION_ID:
            op.execute(f"DROP POLICY IF EXISTS {table}_organisation_isolation ON {table}")
            op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
        op.execute("DROP FUNCTION IF EXISTS rls_bypassed()")
        op.execute("DROP FUNCTION IF EXISTS current_organisation_id()")

    op.drop_table('activites')
    op.drop_index('ix_historique_entreprise', table_name='historique_events')
    op.drop_index('ix_historique_entite', table_name='historique_events')
    op.drop_table('historique_events')
    op.drop_table('emails_envoyes')
    op.drop_table('tickets')
    op.drop_table('extranet_acces')
    op.drop_table('entreprises')
    op.drop_table('fonctions_predefinies')
    op.drop_table('salles')
    op.drop_table('sequences')
    op.drop_table('utilisateurs')
    op.drop_table('organisations')
