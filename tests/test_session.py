"""
Tests for typed session access and provider credentials.
"""

from __future__ import annotations

import time

from salsaflow.core.session import KEY_CREDENTIAL, KEY_PROFILE, SessionState
from salsaflow.schemas.auth import EXPIRY_DELTA_SECONDS, Profile, ProviderCredential


# ---------------------------------------------------------------------------
# Provider credential
# ---------------------------------------------------------------------------

class TestProviderCredential:
    def test_without_expiry_is_valid(self):
        assert ProviderCredential(access_token="t").valid()

    def test_empty_access_token_is_invalid(self):
        assert not ProviderCredential(access_token="").valid()

    def test_expired_is_invalid(self):
        assert not ProviderCredential(access_token="t", expires_at=1000).valid(now=2000)

    def test_about_to_expire_is_invalid(self):
        credential = ProviderCredential(access_token="t", expires_at=1000 + EXPIRY_DELTA_SECONDS - 1)
        assert not credential.valid(now=1000)

    def test_future_expiry_is_valid(self):
        credential = ProviderCredential(access_token="t", expires_at=1000 + EXPIRY_DELTA_SECONDS + 1)
        assert credential.valid(now=1000)

    def test_from_token_with_expires_at(self):
        credential = ProviderCredential.from_token(
            {"access_token": "t", "token_type": "Bearer", "expires_at": 1234, "refresh_token": "r"}
        )
        assert credential.expires_at == 1234
        assert credential.refresh_token == "r"

    def test_from_token_with_expires_in(self):
        before = int(time.time())
        credential = ProviderCredential.from_token({"access_token": "t", "expires_in": 3600})
        assert before + 3600 <= credential.expires_at <= int(time.time()) + 3600


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class TestSessionState:
    def test_empty_session(self):
        session = SessionState({})
        assert session.get_profile() is None
        assert session.get_credential() is None

    def test_profile_round_trip(self):
        data = {}
        session = SessionState(data)
        session.set_profile(Profile(name="Ada", email="ada@example.com"))
        assert data[KEY_PROFILE] == {"name": "Ada", "email": "ada@example.com"}
        assert session.get_profile() == Profile(name="Ada", email="ada@example.com")
        session.delete_profile()
        assert KEY_PROFILE not in data

    def test_credential_is_stored_as_plain_dict(self):
        data = {}
        SessionState(data).set_credential(ProviderCredential(access_token="t", expires_at=5))
        assert data[KEY_CREDENTIAL]["access_token"] == "t"

    def test_invalid_profile_is_dropped(self):
        data = {KEY_PROFILE: "not a profile"}
        assert SessionState(data).get_profile() is None
        assert KEY_PROFILE not in data

    def test_invalid_credential_is_dropped(self):
        data = {KEY_CREDENTIAL: {"expires_at": "soon"}}
        assert SessionState(data).get_credential() is None
        assert KEY_CREDENTIAL not in data

    def test_next_defaults(self):
        session = SessionState({})
        assert session.pop_next("/") == "/"
        session.set_next("/commits")
        assert session.pop_next("/") == "/commits"
        assert session.pop_next("/") == "/"

    def test_clear(self):
        data = {"other": 1}
        session = SessionState(data)
        session.set_profile(Profile(email="ada@example.com"))
        session.set_credential(ProviderCredential(access_token="t"))
        session.set_next("/profile")
        session.clear()
        assert data == {"other": 1}
