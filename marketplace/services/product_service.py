"""
Product listing use cases: creation with image upload, lookup and pagination.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from starlette.concurrency import run_in_threadpool

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import AuthError, NotFoundError, ValidationError, internal_errors
from marketplace.core.tokens import Identity
from marketplace.db.models import Product, User
from marketplace.repositories.sql_repository import SQLRepository
from marketplace.schemas import ProductPayload, validate
from marketplace.services.image_host import ImageKitClient

logger = logging.getLogger(__name__)

MAX_IMAGES = 5
MAX_IMAGE_BYTES = 5 * 1024 * 1024
_IMAGE_EXT = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content_type: str
    content: bytes


def check_image_files(files: Sequence[ImageFile]) -> None:
    if len(files) > MAX_IMAGES:
        raise ValidationError(f"At most {MAX_IMAGES} images are allowed", field="images")
    for item in files:
        is_image = (item.content_type or "").startswith("image/") or bool(_IMAGE_EXT.search(item.filename or ""))
        if not is_image:
            raise ValidationError("Only image files are allowed", field="images")
        if len(item.content) > MAX_IMAGE_BYTES:
            raise ValidationError("File too large", field="images")


def _seller_view(seller_id: str, seller: Optional[User]) -> dict:
    if seller is None:
        return {"id": seller_id}
    return {
        "id": seller.id,
        "username": seller.username,
        "fullName": {"firstName": seller.first_name, "lastName": seller.last_name},
        "email": seller.email,
    }


def product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description or "",
        "price": {"amount": product.price_amount, "currency": product.currency},
        "seller": product.seller_id,
        "images": list(product.images or []),
        "createdAt": product.created_at.isoformat() if product.created_at else None,
    }


@dataclass
class ProductService:
    image_host: ImageKitClient
    repository: Optional[SQLRepository] = None
    settings: Optional[Settings] = field(default=None, repr=False)

    def __post_init__(self):
        self.settings = self.settings or get_settings()
        self.repository = self.repository or SQLRepository()

    def _resolve_seller(self, identity: Optional[Identity], form: Mapping[str, Any]) -> str:
        if identity is not None:
            return identity.id
        if self.settings.products_allow_seller_field:
            seller = str(form.get("seller") or "").strip()
            if seller:
                logger.warning("accepting unauthenticated seller field %s", seller)
                return seller
        raise AuthError("Seller ID is required")

    async def create_product(
        self,
        identity: Optional[Identity],
        form: Mapping[str, Any],
        files: Sequence[ImageFile] = (),
    ) -> dict:
        seller_id = self._resolve_seller(identity, form)
        check_image_files(files)
        if not form.get("title") or not form.get("price"):
            raise ValidationError("Title and price are required")
        fields = {key: form[key] for key in ("title", "description", "price", "currency") if form.get(key) not in (None, "")}
        result = validate(ProductPayload, fields)
        if not result.ok:
            raise ValidationError(result.message, field=result.field)
        data = result.value
        with internal_errors("Failed to create product"):
            uploaded = await asyncio.gather(
                *(self.image_host.upload(item.content, filename=item.filename) for item in files)
            )
            product = await run_in_threadpool(
                self.repository.create_product,
                title=data.title,
                description=data.description,
                price_amount=float(data.price),
                currency=data.currency.value,
                seller_id=seller_id,
                images=[image.to_dict() for image in uploaded],
            )
            logger.info("seller %s created product %s with %d image(s)", seller_id, product.id, len(uploaded))
            return product_to_dict(product)

    def get_product(self, product_id: str) -> dict:
        with internal_errors("Failed to fetch product"):
            found = self.repository.get_product_with_seller(product_id)
            if found is None:
                raise NotFoundError("Product not found")
            product, seller = found
            view = product_to_dict(product)
            view["seller"] = _seller_view(product.seller_id, seller)
            return view

    def get_all_products(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        with internal_errors("Failed to fetch products"):
            total = self.repository.count_products()
            products = self.repository.list_products(offset=(page - 1) * limit, limit=limit)
            return {
                "products": [product_to_dict(product) for product in products],
                "total": total,
                "totalPages": math.ceil(total / limit),
                "currentPage": page,
            }
