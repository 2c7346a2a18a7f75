"""
Exceptions métier partagées.

Elles sont levées par les repositories et services, puis converties
en résultats explicites (ListResult / MutationResult) à la frontière
des actions. Elles ne doivent jamais atteindre le client HTTP brutes.
"""

NOT_AUTHENTICATED = "Non authentifié"


class AuthenticationError(Exception):
    """Pas de session valide ou pas d'organisation résolue."""

    def __init__(self, message: str = NOT_AUTHENTICATED):
        self.message = message
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Rôle insuffisant pour l'action demandée."""

    def __init__(self, action: str):
        self.action = action
        self.message = f"Permission refusée : vous n'avez pas le droit de {action}"
        super().__init__(self.message)


class NotFoundError(Exception):
    """Enregistrement inexistant ou appartenant à une autre organisation."""
    pass


class DuplicateError(Exception):
    """Violation d'une contrainte d'unicité."""

    def __init__(self, message: str, field: str = "_form"):
        self.message = message
        self.field = field
        super().__init__(message)


class InputValidationError(Exception):
    """Entrée invalide : erreurs par champ {champ: [messages]}."""

    def __init__(self, errors: dict):
        self.errors = errors
        super().__init__("Données invalides")


class ExternalServiceError(Exception):
    """Échec d'un collaborateur externe (fournisseur d'authentification...)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
