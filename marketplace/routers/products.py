from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from marketplace.core.tokens import Identity
from marketplace.services.product_service import (
    DEFAULT_PAGE_SIZE,
    MAX_IMAGE_BYTES,
    ImageFile,
    ProductService,
)
from marketplace.services.session_service import app_settings, require_auth

router = APIRouter(prefix="/api/products", tags=["products"])

SELLER_ROLES = ("seller", "admin")
_seller_only = require_auth(SELLER_ROLES)
_seller_or_anonymous = require_auth(SELLER_ROLES, optional=True)


def seller_identity(request: Request) -> Optional[Identity]:
    """Role-gated guard; anonymous callers pass only when the seller form field is allowed."""
    if app_settings(request).products_allow_seller_field:
        return _seller_or_anonymous(request)
    return _seller_only(request)


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


@router.post("", status_code=201)
async def create_product(
    identity: Optional[Identity] = Depends(seller_identity),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    currency: Optional[str] = Form(None),
    seller: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    files = []
    for upload in images or []:
        # one byte past the limit is enough to reject oversized files
        content = await upload.read(MAX_IMAGE_BYTES + 1)
        files.append(ImageFile(filename=upload.filename or "", content_type=upload.content_type or "", content=content))
    form = {
        "title": title,
        "description": description,
        "price": price,
        "currency": currency,
        "seller": seller,
    }
    product = await service.create_product(identity, form, files)
    return {"message": "Product created successfully", "product": product}


@router.get("")
def list_products(page: int = 1, limit: int = DEFAULT_PAGE_SIZE, service: ProductService = Depends(get_product_service)):
    return service.get_all_products(page, limit)


@router.get("/{product_id}")
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return {"product": service.get_product(product_id)}
