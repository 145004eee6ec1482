"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations


def _user(repo, username="alice", email="alice@example.com"):
    return repo.create_user(
        username=username,
        email=email,
        password_hash="hash",
        first_name="Alice",
        last_name="Liddell",
        phone="1234567890",
    )


def test_user_lookup_by_username_or_email(repo):
    alice = _user(repo)

    assert repo.get_user(alice.id).username == "alice"
    assert repo.find_user(username="alice").id == alice.id
    assert repo.find_user(email="alice@example.com").id == alice.id
    assert repo.find_user(username="nobody", email="alice@example.com").id == alice.id
    assert repo.find_user() is None
    assert alice.role == "user"


def test_set_role(repo):
    alice = _user(repo)

    assert repo.set_user_role(alice.id, "seller") is True
    assert repo.get_user(alice.id).role == "seller"
    assert repo.set_user_role("missing", "seller") is False


def test_replace_addresses_rewrites_the_embedded_list(repo):
    alice = _user(repo)

    saved = repo.replace_addresses(alice.id, [{"id": "a1", "city": "Oxford"}])
    assert saved == [{"id": "a1", "city": "Oxford"}]
    assert repo.get_user(alice.id).addresses == saved

    assert repo.replace_addresses(alice.id, []) == []
    assert repo.replace_addresses("missing", []) is None


def test_product_with_seller_and_counts(repo):
    alice = _user(repo)
    product = repo.create_product(
        title="Teapot",
        description="",
        price_amount=12.5,
        currency="GBP",
        seller_id=alice.id,
        images=[{"url": "u", "thumbnail": "t", "id": "i"}],
    )

    found, seller = repo.get_product_with_seller(product.id)
    assert found.title == "Teapot"
    assert found.images == [{"url": "u", "thumbnail": "t", "id": "i"}]
    assert seller.id == alice.id
    assert repo.get_product_with_seller("missing") is None
    assert repo.count_products() == 1
    assert [p.id for p in repo.list_products(offset=0, limit=10)] == [product.id]
    assert repo.list_products(offset=1, limit=10) == []
