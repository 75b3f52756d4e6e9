"""Field validation for entry and prize submissions."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from .errors import ValidationError

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PRIZE_NAME_MAX_LENGTH = 200

_NON_DIGITS_RE = re.compile(r"\D")

_REQUIRED = ("missing", "string_too_short")

# (field, pydantic error type) -> message shown next to the input.
_MESSAGES: dict[tuple[str, str], str] = {
    **{("first_name", t): "First name is required" for t in _REQUIRED},
    ("first_name", "string_too_long"): "First name too long",
    **{("last_name", t): "Last name is required" for t in _REQUIRED},
    ("last_name", "string_too_long"): "Last name too long",
    **{("email", t): "Please enter a valid email address" for t in _REQUIRED},
    ("email", "value_error"): "Please enter a valid email address",
    **{("phone", t): "Phone number is required" for t in _REQUIRED},
    **{("name", t): "Prize name is required" for t in _REQUIRED},
    ("name", "string_too_long"): "Prize name too long",
}


def canonicalize_phone(raw: str) -> str:
    """Return ``raw`` as ``NNN-NNN-NNNN``.

    Any punctuation is ignored, but the value must contain exactly ten digits.

    Raises
    ------
    ValueError
        If the number does not contain exactly ten digits.
    """
    digits = _NON_DIGITS_RE.sub("", raw)
    if len(digits) != 10:
        raise ValueError("Phone number must be exactly 10 digits")
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


def _as_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class EntryFields(BaseModel):
    """Cleaned entry submission ready to be stored."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    first_name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    phone: str = Field(..., min_length=1)

    @field_validator("first_name", "last_name", "email", "phone", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, v):
        if isinstance(v, str) and len(v.strip()) > EMAIL_MAX_LENGTH:
            raise PydanticCustomError("email_too_long", "Email too long")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return canonicalize_phone(v)


class PrizeFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(..., min_length=1, max_length=PRIZE_NAME_MAX_LENGTH)
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        return _as_text(v)

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v):
        return v or None


def _field_errors(exc: pydantic.ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        message = _MESSAGES.get((field, err["type"]))
        if message is None:
            ctx_error = (err.get("ctx") or {}).get("error")
            message = str(ctx_error) if ctx_error is not None else err["msg"]
        errors.setdefault(field, []).append(message)
    return errors


def validate_entry(data: Mapping[str, Any]) -> EntryFields:
    """Validate a raw entry submission.

    Every field is checked before raising so the submitter sees all problems
    at once.

    Raises
    ------
    ValidationError
        With per-field messages in ``fields``.
    """
    try:
        return EntryFields.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation error", _field_errors(exc)) from exc


def validate_prize(data: Mapping[str, Any]) -> PrizeFields:
    try:
        return PrizeFields.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation error", _field_errors(exc)) from exc


__all__ = [
    "EntryFields",
    "PrizeFields",
    "canonicalize_phone",
    "validate_entry",
    "validate_prize",
]
