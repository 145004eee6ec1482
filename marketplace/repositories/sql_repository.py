"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select, update

from marketplace.db.models import Product, User
from marketplace.db.session import SessionFactory, get_session


def new_id() -> str:
    return uuid.uuid4().hex


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def __init__(self, session_factory: Optional[SessionFactory] = None) -> None:
        self._session = session_factory or get_session

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        with self._session() as session:
            return session.get(User, user_id)

    def find_user(self, *, username: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        """Return the first account matching the username or the email."""
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None
        with self._session() as session:
            stmt = select(User).where(or_(*clauses)).limit(1)
            return session.execute(stmt).scalars().first()

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: str,
        role: str = "user",
    ) -> User:
        now = datetime.now(timezone.utc)
        user = User(
            id=new_id(),
            username=username,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=role,
            addresses=[],
            created_at=now,
            updated_at=now,
        )
        with self._session() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def update_user_password(self, user_id: str, password_hash: str) -> None:
        with self._session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def set_user_role(self, user_id: str, role: str) -> bool:
        with self._session() as session:
            stmt = update(User).where(User.id == user_id).values(role=role, updated_at=datetime.now(timezone.utc))
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def replace_addresses(self, user_id: str, addresses: list[dict]) -> Optional[list[dict]]:
        """Overwrite the embedded address list; None when the account is gone."""
        with self._session() as session:
            user = session.get(User, user_id)
            if not user:
                return None
            user.addresses = [dict(entry) for entry in addresses]
            user.updated_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(user)
            return list(user.addresses or [])

    # -------------------------- products --------------------------
    def create_product(
        self,
        *,
        title: str,
        description: str,
        price_amount: float,
        currency: str,
        seller_id: str,
        images: list[dict],
    ) -> Product:
        product = Product(
            id=new_id(),
            title=title,
            description=description,
            price_amount=price_amount,
            currency=currency,
            seller_id=seller_id,
            images=[dict(image) for image in images],
            created_at=datetime.now(timezone.utc),
        )
        with self._session() as session:
            session.add(product)
            session.commit()
            session.refresh(product)
            return product

    def get_product_with_seller(self, product_id: str) -> Optional[tuple[Product, Optional[User]]]:
        with self._session() as session:
            stmt = (
                select(Product, User)
                .outerjoin(User, User.id == Product.seller_id)
                .where(Product.id == product_id)
            )
            row = session.execute(stmt).first()
            if row is None:
                return None
            return row[0], row[1]

    def list_products(self, *, offset: int, limit: int) -> list[Product]:
        with self._session() as session:
            stmt = select(Product).order_by(Product.created_at, Product.id).offset(offset).limit(limit)
            return list(session.execute(stmt).scalars().all())

    def count_products(self) -> int:
        with self._session() as session:
            return int(session.execute(select(func.count()).select_from(Product)).scalar_one())
