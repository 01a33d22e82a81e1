"""Test data for the My Demo App scenarios."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    username: str
    password: str
    display_name: Optional[str] = None


class Address(BaseModel):
    full_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    zip_code: str
    country: str


class PaymentCard(BaseModel):
    card_holder: str
    card_number: str
    expiration_date: str = Field(..., description="MM/YY")
    security_code: str


class Product(BaseModel):
    name: str
    price: str


class Timeouts:
    """Pauses in seconds."""
    SHORT = 1
    MEDIUM = 2
    LONG = 5
    VERY_LONG = 10


def future_expiration_date(today: Optional[date] = None, years: int = 3) -> str:
    """Card expiration as MM/YY, `years` ahead of today."""
    today = today or date.today()
    return f"{today.month:02d}/{(today.year + years) % 100:02d}"


USERS = {
    "valid": User(username="bod@example.com", password="10203040", display_name="Bod"),
    "visual": User(username="visual@example.com", password="10203040", display_name="Visual"),
    "locked": User(username="alice@example.com", password="10203040", display_name="Alice (Locked)"),
    "invalid": User(username="invalid@example.com", password="wrongpassword"),
    "empty": User(username="", password=""),
}

ADDRESSES = {
    "valid": Address(
        full_name="John Doe",
        address_line1="123 Main Street",
        address_line2="Apt 4B",
        city="Düsseldorf",
        state="NRW",
        zip_code="40227",
        country="Germany",
    ),
    "minimal": Address(
        full_name="Jane Smith",
        address_line1="456 Oak Avenue",
        city="Düsseldorf",
        zip_code="40227",
        country="Germany",
    ),
    "german": Address(
        full_name="Jane Smith",
        address_line1="123 Main Street",
        address_line2="Apt 4B",
        city="Düsseldorf",
        state="NRW",
        zip_code="40227",
        country="Germany",
    ),
}

PAYMENTS = {
    "valid": PaymentCard(
        card_holder="Jane Smith",
        card_number="4111111111111111",
        expiration_date=future_expiration_date(),
        security_code="123",
    ),
    "invalid": PaymentCard(
        card_holder="Jane Smith",
        card_number="1234567890123456",
        expiration_date="01/20",
        security_code="999",
    ),
}

PRODUCTS = {
    "backpack": Product(name="Sauce Labs Backpack", price="$29.99"),
    "bike_light": Product(name="Sauce Labs Bike Light", price="$9.99"),
    "bolt_tshirt": Product(name="Sauce Labs Bolt T-Shirt", price="$15.99"),
    "fleece_jacket": Product(name="Sauce Labs Fleece Jacket", price="$49.99"),
    "onesie": Product(name="Sauce Labs Onesie", price="$7.99"),
    "red_tshirt": Product(name="Test.allTheThings() T-Shirt", price="$15.99"),
}
