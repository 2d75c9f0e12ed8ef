"""Unit tests for password hashing and the token service."""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from navigator.errors import InvalidToken
from navigator.services.auth import TokenService, hash_password, verify_password


def test_hash_password_is_salted_and_verifies():
    a = hash_password("s3cret!", rounds=4)
    b = hash_password("s3cret!", rounds=4)
    assert a != b
    assert verify_password("s3cret!", a)
    assert verify_password("s3cret!", b)
    assert not verify_password("wrong", a)


def test_hash_password_none_rejected():
    with pytest.raises(ValueError):
        hash_password(None)


def test_verify_password_malformed_hash_is_false():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_round_trip(tokens):
    token = tokens.issue(7, "a@example.com", "employer")
    payload = tokens.verify(token)
    assert payload.user_id == 7
    assert payload.email == "a@example.com"
    assert payload.role == "employer"
    assert payload.expires_at - payload.issued_at == 24 * 3600


def test_token_expired(tokens):
    old = datetime.now(timezone.utc) - timedelta(hours=25)
    token = tokens.issue(7, "a@example.com", "employer", now=old)
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_token_wrong_secret(test_settings, tokens):
    other = TokenService(test_settings.model_copy(update={"secret_key": "another-secret"}))
    token = other.issue(7, "a@example.com", "admin")
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_token_tampered(tokens):
    token = tokens.issue(7, "a@example.com", "employer")
    head, body, sig = token.split(".")
    tampered = ".".join([head, body, sig[:-2] + ("AA" if sig[-2:] != "AA" else "BB")])
    with pytest.raises(InvalidToken):
        tokens.verify(tampered)


def test_token_garbage(tokens):
    with pytest.raises(InvalidToken):
        tokens.verify("not.a.jwt")


@pytest.mark.parametrize(
    "claims",
    [
        {"email": "a@example.com", "role": "admin"},
        {"userId": "7", "email": "a@example.com", "role": "admin"},
        {"userId": True, "email": "a@example.com", "role": "admin"},
        {"userId": 7, "role": "admin"},
        {"userId": 7, "email": "a@example.com"},
    ],
)
def test_token_malformed_payload(test_settings, tokens, claims):
    exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    token = jwt.encode({**claims, "exp": exp}, test_settings.secret_key, algorithm="HS256")
    with pytest.raises(InvalidToken):
        tokens.verify(token)
