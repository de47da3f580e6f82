"""Unit tests for access-token minting and decoding."""

from datetime import timedelta

import pytest
from jose import jwt
from libs.auth.models import TokenClaims
from libs.auth.passwords import hash_password, verify_password
from libs.auth.tokens import TokenDecodeError, decode_access_token, issue_access_token
from libs.common.datetime_utils import utc_now


@pytest.mark.unit
def test_issued_token_decodes_to_its_claims():
    issued = issue_access_token(42)

    claims = decode_access_token(issued.token)

    assert claims.user_id == 42
    assert claims.jti == issued.token_id
    assert issued.expires_at is not None
    assert claims.exp == int(issued.expires_at.timestamp())


@pytest.mark.unit
def test_each_token_gets_a_fresh_id():
    assert issue_access_token(1).token_id != issue_access_token(1).token_id


@pytest.mark.unit
def test_tampered_token_is_rejected():
    token = issue_access_token(1).token
    header, payload, signature = token.split(".")

    with pytest.raises(TokenDecodeError):
        decode_access_token(f"{header}.{payload}.{signature[::-1]}")


@pytest.mark.unit
def test_token_signed_with_another_key_is_rejected():
    forged = jwt.encode({"sub": "1", "jti": "abc", "iat": 0}, "other-key", algorithm="HS256")

    with pytest.raises(TokenDecodeError):
        decode_access_token(forged)


@pytest.mark.unit
def test_expired_token_is_rejected():
    issued = issue_access_token(1, now=utc_now() - timedelta(days=30))

    with pytest.raises(TokenDecodeError):
        decode_access_token(issued.token)


@pytest.mark.unit
def test_garbage_is_rejected():
    with pytest.raises(TokenDecodeError):
        decode_access_token("not-a-token")


@pytest.mark.unit
def test_non_numeric_subject_has_no_user_id():
    claims = TokenClaims(sub="abc", jti="x", iat=0)

    with pytest.raises(ValueError):
        claims.user_id


@pytest.mark.unit
def test_password_hash_round_trip():
    hashed = hash_password("Secret#123")

    assert hashed != "Secret#123"
    assert verify_password("Secret#123", hashed)
    assert not verify_password("secret#123", hashed)
