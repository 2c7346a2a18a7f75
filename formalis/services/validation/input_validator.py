"""
Validation des entrées des actions.

Les schémas sont des modèles pydantic ; validate_input() ne lève jamais
et retourne soit le modèle validé, soit un dictionnaire
{champ: [messages]} directement utilisable comme erreur de mutation.

Convention : une chaîne vide soumise pour un champ optionnel vaut
"non renseigné" (None), jamais une chaîne vide persistée.
"""

from typing import Any, Annotated, Dict, List, Mapping, Optional, Tuple, Type, TypeVar
from uuid import UUID

from pydantic import (
    AfterValidator,
    BaseModel,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from formalis.core.results import FORM_ERROR_KEY, FieldErrors

M = TypeVar("M", bound=BaseModel)


def required_text(message: str, max_length: Optional[int] = None):
    """
    Type de champ texte requis avec un message métier unique.

    Absent, vide ou blanc donnent tous `message` (ex: "Le nom est requis").

    Usage:
        class SalleCreate(FormSchema):
            nom: required_text("Le nom est requis") = None
    """
    def _check(value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError(message)
        value = value.strip()
        if max_length is not None and len(value) > max_length:
            raise ValueError(f"{max_length} caractères maximum")
        return value

    return Annotated[Optional[str], Field(validate_default=True), AfterValidator(_check)]


_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def optional_email(message: str = "Email invalide"):
    """
    Type de champ email optionnel (vide = None) avec un message métier.

    Usage:
        email: optional_email() = None
    """
    def _check(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            return _EMAIL_ADAPTER.validate_python(value.strip())
        except ValidationError:
            raise ValueError(message)

    return Annotated[Optional[str], AfterValidator(_check)]


def required_email(message: str = "Email invalide"):
    """Type de champ email requis : absent, vide ou mal formé donnent `message`."""
    def _check(value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError(message)
        try:
            return _EMAIL_ADAPTER.validate_python(value.strip())
        except ValidationError:
            raise ValueError(message)

    return Annotated[Optional[str], Field(validate_default=True), AfterValidator(_check)]


def clean_empty_strings(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Remplace les chaînes vides par None (copie superficielle).

    Idempotent : clean_empty_strings(clean_empty_strings(d)) == clean_empty_strings(d)
    """
    return {key: (None if value == "" else value) for key, value in data.items()}


class FormSchema(BaseModel):
    """
    Base des schémas d'entrée des formulaires.

    Les chaînes vides sont converties en None avant validation, de sorte
    qu'un champ optionnel soumis vide n'est jamais persisté comme "".
    Un champ requis soumis vide échoue avec son message "requis".
    """

    @model_validator(mode="before")
    @classmethod
    def _empty_strings_to_none(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return clean_empty_strings(data)
        return data


def _message(error: Dict[str, Any]) -> str:
    """Message lisible d'une erreur pydantic (sans le préfixe 'Value error, ')."""
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return error.get("msg", "Valeur invalide")


def format_validation_errors(exc: ValidationError) -> FieldErrors:
    """
    Convertit une ValidationError en {champ: [messages]}.

    - emplacements imbriqués joints par "." (ex: "fichiers.0.nom")
    - erreurs de niveau modèle rangées sous "_form"
    """
    errors: FieldErrors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(loc) if loc else FORM_ERROR_KEY
        errors.setdefault(field, []).append(_message(error))
    return errors


def validate_input(schema: Type[M], payload: Any) -> Tuple[Optional[M], Optional[FieldErrors]]:
    """
    Valide une entrée non typée.

    Returns:
        (modèle, None) si valide, (None, {champ: [messages]}) sinon
    """
    if payload is None:
        payload = {}
    try:
        return schema.model_validate(payload), None
    except ValidationError as exc:
        return None, format_validation_errors(exc)


class IdList(FormSchema):
    """Sélection d'enregistrements pour une opération groupée."""
    ids: List[UUID] = Field(default_factory=list, validate_default=True)

    @field_validator("ids")
    @classmethod
    def not_empty(cls, value: List[UUID]) -> List[UUID]:
        if not value:
            raise ValueError("Aucun élément sélectionné")
        return value
