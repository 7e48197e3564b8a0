import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from gooddeeds.core.dependencies import decode_token, verify_token
from gooddeeds.utils.env_helper import env_bool, env_list

from fakes import ALICE, make_token


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_valid_token_yields_user_context():
    user = verify_token(bearer(make_token(ALICE)))

    assert user.user_id == ALICE
    assert user.email == "a111@example.com"


def test_wrong_secret_is_rejected():
    token = make_token(ALICE, secret="another-secret-that-is-long-enough-000")

    with pytest.raises(HTTPException) as exc_info:
        verify_token(bearer(token))

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid token"


def test_wrong_issuer_is_rejected():
    with pytest.raises(jwt.InvalidIssuerError):
        decode_token(make_token(ALICE, issuer="https://elsewhere.supabase.co/auth/v1"))


def test_token_without_subject_is_rejected():
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(make_token(""))


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    monkeypatch.setenv("ORIGINS", "http://a.test, ,http://b.test")

    assert env_bool("FLAG") is True
    assert env_bool("MISSING_FLAG", default=True) is True
    assert env_list("ORIGINS") == ["http://a.test", "http://b.test"]
    assert env_list("MISSING_LIST", default=["x"]) == ["x"]
