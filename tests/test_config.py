"""Unit tests for core/config.py -- SECRET_KEY policy and defaults."""

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_debug_generates_secret_key():
    s = Settings(debug=True, secret_key="")
    assert len(s.secret_key) >= 32


def test_production_requires_secret_key():
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(debug=False, secret_key="")


def test_short_secret_key_rejected():
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(debug=True, secret_key="short")


def test_explicit_secret_key_kept():
    key = "k" * 40
    assert Settings(debug=False, secret_key=key).secret_key == key


def test_bcrypt_rounds_bounds():
    with pytest.raises(ValidationError):
        Settings(debug=True, bcrypt_rounds=3)
    assert Settings(debug=True, bcrypt_rounds=4).bcrypt_rounds == 4
