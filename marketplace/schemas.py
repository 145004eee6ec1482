"""
Request payload schemas.

Each payload shape has a pydantic model; ``validate`` runs one of them over a
raw mapping and returns either the normalized value or the first failing
field with a readable message. Nothing here touches storage.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic import ValidationError as PydanticValidationError


class Role(str, Enum):
    user = "user"
    seller = "seller"


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    AUD = "AUD"


DEFAULT_CURRENCY = Currency.INR


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)


class FullName(_Payload):
    first_name: str = Field(min_length=1, alias="firstName")
    last_name: str = Field(min_length=1, alias="lastName")


class RegisterPayload(_Payload):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    email: EmailStr
    full_name: FullName = Field(alias="fullName")
    phone: str = Field(min_length=10)


class LoginPayload(_Payload):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def _username_or_email(self) -> "LoginPayload":
        if not self.username and not self.email:
            raise ValueError("Either username or email is required")
        return self


class AddressPayload(_Payload):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str = Field(min_length=5)
    country: str = Field(min_length=1)
    is_default: bool = Field(default=False, alias="isDefault")


class ProductPayload(_Payload):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    price: float = Field(gt=0, allow_inf_nan=False)
    currency: Currency = DEFAULT_CURRENCY


M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Valid(Generic[M]):
    value: M
    ok: bool = True


@dataclass(frozen=True)
class Invalid:
    field: Optional[str]
    message: str
    ok: bool = False


Result = Union[Valid[M], Invalid]


def describe_error(err: Mapping[str, Any], loc: Optional[Sequence[Any]] = None) -> Invalid:
    """Turn one pydantic error entry into an ``Invalid`` named after its field."""
    if loc is None:
        loc = err.get("loc", ())
    loc = [str(part) for part in loc]
    field = ".".join(loc) or None
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        message = str(err["ctx"]["error"])
    else:
        message = err.get("msg", "Invalid value")
    if field:
        message = f"{field}: {message}"
    return Invalid(field=field, message=message)


def _first_error(exc: PydanticValidationError) -> Invalid:
    return describe_error(exc.errors()[0])


def validate(model: Type[M], payload: Optional[Mapping[str, Any]]) -> Result:
    """Validate ``payload`` against ``model`` without side effects."""
    if payload is not None and not isinstance(payload, Mapping):
        return Invalid(field=None, message="Request body must be an object")
    try:
        return Valid(model.model_validate(dict(payload or {})))
    except PydanticValidationError as exc:
        return _first_error(exc)
