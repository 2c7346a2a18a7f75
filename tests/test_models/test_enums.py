"""
Tests des énumérations fermées et de leur repli sur les valeurs inconnues.
"""

from formalis.models.enums import (
    ACTION_LABELS,
    MODULE_LABELS,
    TICKET_STATUT_LABELS,
    HistoriqueAction,
    HistoriqueModule,
    TicketStatut,
    label_for,
    parse_enum,
)


class TestParseEnum:

    def test_known_value(self):
        assert parse_enum(HistoriqueModule, "salle") is HistoriqueModule.SALLE

    def test_unknown_value_kept_raw(self):
        """Une valeur plus récente que le code n'interrompt pas la lecture."""
        assert parse_enum(HistoriqueModule, "module_futur") == "module_futur"

    def test_none(self):
        assert parse_enum(HistoriqueAction, None) is None


class TestLabels:

    def test_every_module_has_label(self):
        assert set(MODULE_LABELS) == set(HistoriqueModule)

    def test_every_action_has_label(self):
        assert set(ACTION_LABELS) == set(HistoriqueAction)

    def test_label_for_member(self):
        assert label_for(TICKET_STATUT_LABELS, TicketStatut.RESOLU) == "Résolu"

    def test_label_for_raw_value(self):
        assert label_for(ACTION_LABELS, "action_inconnue") == "action_inconnue"

    def test_label_for_none(self):
        assert label_for(ACTION_LABELS, None) is None
