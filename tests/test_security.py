import jwt
import pytest

from backend.app.core.security import (
    TOKEN_ALGORITHM,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_verifies_only_the_original():
    hashed = get_password_hash("secret")
    assert hashed != "secret"
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)


def test_token_carries_subject_and_lifetime_claims():
    claims = decode_access_token(create_access_token(user_id=123, expires_minutes=5))
    assert claims["sub"] == "123"
    assert claims["exp"] - claims["iat"] == 300


def test_expired_token_raises_value_error():
    with pytest.raises(ValueError, match="Expired"):
        decode_access_token(create_access_token(user_id=1, expires_minutes=-1))


def test_foreign_signature_raises_value_error():
    forged = jwt.encode({"sub": "1"}, "not-the-secret", algorithm=TOKEN_ALGORITHM)
    with pytest.raises(ValueError, match="Invalid"):
        decode_access_token(forged)
