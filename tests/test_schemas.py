from __future__ import annotations

from marketplace.schemas import (
    AddressPayload,
    Currency,
    LoginPayload,
    ProductPayload,
    RegisterPayload,
    validate,
)
from tests.conftest import account_payload


def test_register_payload_is_trimmed():
    result = validate(RegisterPayload, account_payload(username="  meuser  "))
    assert result.ok
    assert result.value.username == "meuser"
    assert result.value.full_name.first_name == "Me"


def test_register_reports_first_failing_field_in_declaration_order():
    result = validate(RegisterPayload, account_payload(username="ab", password="123", email="nope"))
    assert not result.ok
    assert result.field == "username"
    assert result.message.startswith("username:")


def test_register_rejects_bad_email_and_short_phone():
    bad_email = validate(RegisterPayload, account_payload(email="not-an-email"))
    assert not bad_email.ok and bad_email.field == "email"

    short_phone = validate(RegisterPayload, account_payload(phone="12345"))
    assert not short_phone.ok and short_phone.field == "phone"


def test_register_requires_both_name_parts():
    result = validate(RegisterPayload, account_payload(fullName={"firstName": "Me", "lastName": "   "}))
    assert not result.ok
    assert result.field == "fullName.lastName"


def test_login_needs_username_or_email():
    result = validate(LoginPayload, {"password": "secret"})
    assert not result.ok
    assert result.message == "Either username or email is required"

    assert validate(LoginPayload, {"email": "me@example.com", "password": "secret"}).ok
    assert validate(LoginPayload, {"username": "meuser", "password": "secret"}).ok


def test_address_pincode_minimum_length():
    payload = {"street": "1 Main St", "city": "Pune", "state": "MH", "pincode": "411", "country": "India"}
    result = validate(AddressPayload, payload)
    assert not result.ok
    assert result.field == "pincode"

    payload["pincode"] = "411001"
    ok = validate(AddressPayload, payload)
    assert ok.ok
    assert ok.value.is_default is False


def test_product_price_and_currency_rules():
    ok = validate(ProductPayload, {"title": "Lamp", "price": "99.99"})
    assert ok.ok
    assert ok.value.price == 99.99
    assert ok.value.currency is Currency.INR

    assert validate(ProductPayload, {"title": "Lamp", "price": "0"}).field == "price"
    assert validate(ProductPayload, {"title": "Lamp", "price": "abc"}).field == "price"
    assert validate(ProductPayload, {"title": "Lamp", "price": "inf"}).field == "price"
    assert validate(ProductPayload, {"title": "Lamp", "price": "nan"}).field == "price"
    assert validate(ProductPayload, {"title": "Lamp", "price": "10", "currency": "BTC"}).field == "currency"
    assert validate(ProductPayload, {"title": "La", "price": "10"}).field == "title"


def test_non_object_payload_is_rejected():
    result = validate(LoginPayload, ["username", "password"])
    assert not result.ok
    assert result.field is None
