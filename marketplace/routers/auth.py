from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response

from marketplace.core.tokens import Identity
from marketplace.services.auth_service import AuthService
from marketplace.services.session_service import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    require_auth,
    set_session_cookie,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
current_identity = require_auth()


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


@router.post("/register", status_code=201)
def register(response: Response, payload: Any = Body(None), service: AuthService = Depends(get_auth_service)):
    result = service.register(payload)
    set_session_cookie(response, result.token, service.settings)
    return {"message": "User registered successfully", "user": result.user}


@router.post("/login")
def login(response: Response, payload: Any = Body(None), service: AuthService = Depends(get_auth_service)):
    result = service.login(payload)
    set_session_cookie(response, result.token, service.settings)
    return {"message": "Logged in successfully", "user": result.user}


@router.get("/me")
def me(identity: Identity = Depends(current_identity), service: AuthService = Depends(get_auth_service)):
    return {"user": service.get_current_user(identity)}


@router.get("/logout")
def logout(request: Request, response: Response, service: AuthService = Depends(get_auth_service)):
    service.logout(request.cookies.get(SESSION_COOKIE_NAME))
    clear_session_cookie(response, service.settings)
    return {"message": "Logged out successfully"}


@router.get("/users/me/addresses")
def list_addresses(identity: Identity = Depends(current_identity), service: AuthService = Depends(get_auth_service)):
    return {"addresses": service.get_user_addresses(identity)}


@router.post("/users/me/addresses", status_code=201)
def add_address(
    payload: Any = Body(None),
    identity: Identity = Depends(current_identity),
    service: AuthService = Depends(get_auth_service),
):
    added = service.add_user_address(identity, payload)
    body = {"message": "Address added successfully", "address": added.address}
    if added.default_address_id:
        body["defaultAddressId"] = added.default_address_id
    return body


@router.delete("/users/me/addresses/{address_id}")
def delete_address(
    address_id: str,
    identity: Identity = Depends(current_identity),
    service: AuthService = Depends(get_auth_service),
):
    remaining = service.delete_user_address(identity, address_id)
    return {"message": "Address deleted successfully", "addresses": remaining}
