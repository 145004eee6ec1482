"""
Authentication and account related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
    internal_errors,
)
from marketplace.core.security import hash_password, needs_rehash, verify_password
from marketplace.core.tokens import Identity, issue_token
from marketplace.db.models import User
from marketplace.repositories.sql_repository import SQLRepository, new_id
from marketplace.schemas import (
    AddressPayload,
    LoginPayload,
    RegisterPayload,
    Role,
    validate,
)
from marketplace.services.revocation import RevocationList

logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def account_to_dict(user: User) -> dict:
    """Public view of an account. The password hash never leaves this module."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullName": {"firstName": user.first_name, "lastName": user.last_name},
        "phone": user.phone,
        "role": user.role,
        "addresses": list(user.addresses or []),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def identity_for(user: User) -> Identity:
    return Identity(id=user.id, username=user.username, email=user.email, role=user.role)


def _checked(model, payload):
    result = validate(model, payload)
    if not result.ok:
        raise ValidationError(result.message, field=result.field)
    return result.value


@dataclass
class AuthResult:
    user: dict
    token: str


@dataclass
class AddressAdded:
    address: dict
    default_address_id: Optional[str] = None


@dataclass
class AuthService:
    """Handles registration, login, logout and the address book of an account."""

    repository: Optional[SQLRepository] = None
    revocation: Optional[RevocationList] = None
    settings: Optional[Settings] = field(default=None, repr=False)

    def __post_init__(self):
        self.settings = self.settings or get_settings()
        self.repository = self.repository or SQLRepository()
        self.revocation = self.revocation or RevocationList(None)

    # -------------------------------------- registration --------------------------------------
    def register(self, payload: Mapping[str, Any]) -> AuthResult:
        data = _checked(RegisterPayload, payload)
        with internal_errors("Internal server error"):
            if self.repository.find_user(username=data.username, email=data.email):
                raise ConflictError("Username or email already exists")
            try:
                user = self.repository.create_user(
                    username=data.username,
                    email=data.email,
                    password_hash=hash_password(data.password),
                    first_name=data.full_name.first_name,
                    last_name=data.full_name.last_name,
                    phone=data.phone,
                    role=Role.user.value,
                )
            except IntegrityError:
                # lost a race against a concurrent registration
                raise ConflictError("Username or email already exists")
            logger.info("registered account %s (%s)", user.id, user.username)
            token = issue_token(identity_for(user), self.settings)
            return AuthResult(user=account_to_dict(user), token=token)

    # -------------------------------------- login --------------------------------------
    def login(self, payload: Mapping[str, Any]) -> AuthResult:
        data = _checked(LoginPayload, payload)
        with internal_errors("Internal server error"):
            # a username wins over an email so one request never spans two accounts
            if data.username:
                user = self.repository.find_user(username=data.username)
            else:
                user = self.repository.find_user(email=data.email)
            if not user:
                raise NotFoundError("User not found")
            if not verify_password(data.password, user.password_hash):
                logger.info("failed login for %s", user.username)
                raise AuthError("Invalid credentials")
            if needs_rehash(user.password_hash):
                self.repository.update_user_password(user.id, hash_password(data.password))
            token = issue_token(identity_for(user), self.settings)
            return AuthResult(user=account_to_dict(user), token=token)

    def get_current_user(self, identity: Identity) -> dict:
        return identity.to_dict()

    def logout(self, token: Optional[str]) -> None:
        """Best-effort revocation; never raises."""
        if not token:
            return
        try:
            self.revocation.revoke(token, self.settings.revocation_ttl_seconds)
        except Exception:
            logger.exception("could not record revoked token")

    # -------------------------------------- addresses --------------------------------------
    def _load_user(self, identity: Identity) -> User:
        user = self.repository.get_user(identity.id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_user_addresses(self, identity: Identity) -> list[dict]:
        with internal_errors("Internal server error"):
            return list(self._load_user(identity).addresses or [])

    def add_user_address(self, identity: Identity, payload: Mapping[str, Any]) -> AddressAdded:
        data = _checked(AddressPayload, payload)
        with internal_errors("Internal server error"):
            user = self._load_user(identity)
            entry = {
                "id": new_id(),
                "street": data.street,
                "city": data.city,
                "state": data.state,
                "pincode": data.pincode,
                "country": data.country,
                "isDefault": data.is_default,
            }
            addresses = [dict(existing) for existing in (user.addresses or [])]
            if data.is_default:
                for existing in addresses:
                    existing["isDefault"] = False
            addresses.append(entry)
            saved = self.repository.replace_addresses(user.id, addresses)
            if saved is None:
                raise NotFoundError("User not found")
            added = saved[-1]
            return AddressAdded(address=added, default_address_id=added["id"] if added.get("isDefault") else None)

    def delete_user_address(self, identity: Identity, address_id: str) -> list[dict]:
        with internal_errors("Internal server error"):
            user = self._load_user(identity)
            addresses = list(user.addresses or [])
            remaining = [entry for entry in addresses if entry.get("id") != address_id]
            if len(remaining) == len(addresses):
                raise NotFoundError("Address not found")
            saved = self.repository.replace_addresses(user.id, remaining)
            if saved is None:
                raise NotFoundError("User not found")
            return saved
