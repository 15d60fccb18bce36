"""Tests for app.core.session: signed session cookies."""

from datetime import timedelta

from fastapi import Response
from jose import jwt

from app.core.session import SessionManager
from app.core.timeutils import utcnow


def make_manager(**overrides):
    params = {"secret": "unit-secret", "ttl_days": 30, "cookie_name": "shiori_session"}
    params.update(overrides)
    return SessionManager(**params)


class TestIssueAndVerify:
    def test_round_trip_returns_user_id(self):
        manager = make_manager()
        token = manager.issue(42)
        assert manager.verify(token) == 42

    def test_expiry_is_thirty_days(self):
        manager = make_manager()
        claims = jwt.get_unverified_claims(manager.issue(7))
        assert claims["exp"] - claims["iat"] == 30 * 24 * 3600
        assert claims["type"] == "session"

    def test_missing_token_is_none(self):
        manager = make_manager()
        assert manager.verify(None) is None
        assert manager.verify("") is None

    def test_garbage_token_is_none(self):
        assert make_manager().verify("not-a-jwt") is None

    def test_wrong_secret_is_none(self):
        token = make_manager(secret="other").issue(1)
        assert make_manager().verify(token) is None

    def test_expired_token_is_none(self):
        past = utcnow() - timedelta(days=31)
        token = jwt.encode(
            {"sub": "1", "type": "session", "iat": int(past.timestamp()), "exp": int(past.timestamp()) + 60},
            "unit-secret",
            algorithm="HS256",
        )
        assert make_manager().verify(token) is None

    def test_wrong_type_is_none(self):
        token = jwt.encode({"sub": "1", "type": "refresh"}, "unit-secret", algorithm="HS256")
        assert make_manager().verify(token) is None

    def test_non_numeric_subject_is_none(self):
        token = jwt.encode({"sub": "abc", "type": "session"}, "unit-secret", algorithm="HS256")
        assert make_manager().verify(token) is None


class TestCookies:
    def test_set_cookie_attributes(self):
        response = Response()
        make_manager().set_cookie(response, "tok")
        header = response.headers["set-cookie"]
        assert header.startswith("shiori_session=tok")
        assert "HttpOnly" in header
        assert "samesite=lax" in header.lower()
        assert "Max-Age=2592000" in header
        assert "Secure" not in header

    def test_secure_flag_in_production(self):
        response = Response()
        make_manager(secure_cookie=True).set_cookie(response, "tok")
        assert "Secure" in response.headers["set-cookie"]

    def test_clear_cookie_expires_it(self):
        response = Response()
        make_manager().clear_cookie(response)
        header = response.headers["set-cookie"]
        assert header.startswith('shiori_session=""')
        assert "Max-Age=0" in header
