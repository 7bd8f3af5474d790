import pytest

from ofsc.core.models import Credentials, Page
from ofsc.exceptions import ValidationError


class TestCredentials:
    """Tests for credential-derived URLs and environment loading."""

    def test_derived_urls(self, credentials: Credentials) -> None:
        assert credentials.base_url == "https://acme.fs.ocs.oraclecloud.com"
        assert credentials.token_url.endswith("/rest/oauthTokenService/v2/token")
        assert credentials.core_url == f"{credentials.base_url}/rest/ofscCore/v1"

    def test_custom_backend_host(self) -> None:
        creds = Credentials("c", "s", "acme", backend_host="test.example.net")

        assert creds.base_url == "https://acme.test.example.net"

    def test_secret_hidden_from_repr(self, credentials: Credentials) -> None:
        assert "secret" not in repr(credentials)

    def test_is_immutable(self, credentials: Credentials) -> None:
        with pytest.raises(AttributeError):
            credentials.client_id = "other"  # type: ignore[misc]

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OFSC_CLIENT_ID", "cid")
        monkeypatch.setenv("OFSC_CLIENT_SECRET", "csecret")
        monkeypatch.setenv("OFSC_INSTANCE_URL", "acme-test")
        monkeypatch.delenv("OFSC_BACKEND_HOST", raising=False)

        creds = Credentials.from_env()

        assert creds == Credentials("cid", "csecret", "acme-test")

    def test_from_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OFSC_CLIENT_ID", "cid")
        monkeypatch.delenv("OFSC_CLIENT_SECRET", raising=False)
        monkeypatch.delenv("OFSC_INSTANCE_URL", raising=False)

        missing = "OFSC_CLIENT_SECRET, OFSC_INSTANCE_URL"
        with pytest.raises(ValidationError, match=missing):
            Credentials.from_env()


class TestPage:
    """Tests for parsing page payloads."""

    def test_full_payload(self) -> None:
        page = Page.from_payload(
            {"items": [{"id": 1}], "offset": "0", "limit": 100, "totalResults": 1}
        )

        assert page == Page(items=[{"id": 1}], offset=0, limit=100, total_results=1)

    def test_zone_style_payload(self) -> None:
        page = Page.from_payload(
            {"items": [], "hasMore": False, "offset": 0, "totalResults": 0}
        )

        assert page.has_more is False
        assert page.limit is None

    @pytest.mark.parametrize(
        argnames="payload", argvalues=[None, [], "text", {"items": None}]
    )
    def test_unusable_payload_is_empty(self, payload: object) -> None:
        assert Page.from_payload(payload).items == []
