"""
Small pure helpers: status normalisation, upload file names, update timestamps.
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from topup.schemas.order import OrderCreate, OrderStatus, normalize_status
from topup.services.order import next_updated_at
from topup.services.uploads import generate_filename, sanitize_filename


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("completed", "completed"),
        ("COMPLETED", "completed"),
        (" Processing ", "processing"),
        ("rejected", "rejected"),
        ("Refunded", "Refunded"),
        ("", ""),
        (None, ""),
        ("   ", ""),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_pending_is_initial_status():
    assert OrderStatus.PENDING.value == "pending"


def test_order_create_accepts_camel_and_snake_case():
    camel = OrderCreate.model_validate({"gameId": "1", "packageName": "p", "status": "completed"})
    snake = OrderCreate.model_validate({"game_id": "1", "package_name": "p"})

    assert camel == snake
    assert not hasattr(camel, "status")


def test_sanitize_filename():
    assert sanitize_filename("my  proof (1).png") == "my-proof-1.png"
    assert sanitize_filename("ငွေလွှဲ.jpg") == ".jpg"
    assert sanitize_filename("a_b-c.JPG") == "a_b-c.JPG"
    assert sanitize_filename("") == ""


def test_generate_filename_shape():
    name = generate_filename("receipt 1.png")

    assert re.fullmatch(r"\d{13}-\d{1,10}-receipt-1\.png", name)
    assert generate_filename("x.png") != generate_filename("x.png")


def test_next_updated_at_moves_forward():
    future = datetime.now(timezone.utc) + timedelta(seconds=5)

    assert next_updated_at(future) == future + timedelta(microseconds=1)
    assert next_updated_at(future.replace(tzinfo=None)) == future + timedelta(microseconds=1)

    past = datetime.now(timezone.utc) - timedelta(seconds=5)
    assert next_updated_at(past) > past
    assert next_updated_at(None).tzinfo is not None
