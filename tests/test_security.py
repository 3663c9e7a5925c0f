from datetime import timedelta

import pytest
from jose import JWTError, jwt

from myhood.core.config import settings
from myhood.core.security import GLOBAL_ADMIN, create_access_token, decode_access_token

from tests.helpers import auth_header, make_user, token_for


def test_access_token_round_trip():
    token = create_access_token("abc", email="a@example.com", roles=[GLOBAL_ADMIN])
    claims = decode_access_token(token)
    assert claims.sub == "abc"
    assert claims.email == "a@example.com"
    assert claims.is_global_admin


def test_expired_token_is_rejected():
    token = create_access_token("abc", expires_delta=timedelta(seconds=-5))
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_token_without_identity_is_rejected():
    token = jwt.encode({"type": "access", "exp": 9999999999}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_token_for_deleted_user_is_unauthorized(client, db):
    user = make_user(db)
    token = token_for(user)

    r = client.delete(f"/users/{user.id}", headers=auth_header(token))
    assert r.status_code == 204, r.text

    r = client.get("/users/me", headers=auth_header(token))
    assert r.status_code == 401
