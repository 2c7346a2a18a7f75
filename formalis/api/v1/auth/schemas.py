"""
Schémas Pydantic pour le module Auth.
"""
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from formalis.services.validation import FormSchema

PASSWORD_MIN_LENGTH = 8


class SetPasswordInput(FormSchema):
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    next: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        if v is None or len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Le mot de passe doit contenir au moins {PASSWORD_MIN_LENGTH} caractères")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "SetPasswordInput":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Les mots de passe ne correspondent pas")
        return self


class SetPasswordResponse(BaseModel):
    activated: int
    redirect: str
