# =============================================================================
# Auth Provider Unit Tests
# =============================================================================

import pytest
from starlette.testclient import TestClient

from app.auth.providers import AuthenticatedUser, BasicAuthProvider
from app.config import Settings, get_settings
from app.main import app
from app.services.job_service import get_job_manager


class TestBasicAuthProvider:
    """Tests for BasicAuthProvider."""

    def test_authenticate_valid_credentials(self):
        """Valid username and password should return AuthenticatedUser."""
        provider = BasicAuthProvider(username="admin", password="secret")

        result = provider.authenticate("admin", "secret")

        assert result is not None
        assert isinstance(result, AuthenticatedUser)
        assert result.username == "admin"

    def test_authenticate_invalid_username(self):
        """Invalid username should return None."""
        provider = BasicAuthProvider(username="admin", password="secret")

        assert provider.authenticate("wrong", "secret") is None

    def test_authenticate_invalid_password(self):
        """Invalid password should return None."""
        provider = BasicAuthProvider(username="admin", password="secret")

        assert provider.authenticate("admin", "wrong") is None

    def test_authenticate_missing_credentials(self):
        """Missing credentials should return None."""
        provider = BasicAuthProvider(username="admin", password="secret")

        assert provider.authenticate(None, "secret") is None
        assert provider.authenticate("admin", None) is None
        assert provider.authenticate(None, None) is None

    def test_authenticate_empty_credentials(self):
        """Empty string credentials should return None."""
        provider = BasicAuthProvider(username="admin", password="secret")

        assert provider.authenticate("", "") is None

    def test_non_ascii_credentials(self):
        provider = BasicAuthProvider(username="opérateur", password="mot-de-passe")

        assert provider.authenticate("opérateur", "mot-de-passe") is not None
        assert provider.authenticate("operateur", "mot-de-passe") is None


class TestAuthenticatedUser:
    """Tests for AuthenticatedUser dataclass."""

    def test_authenticated_user_creation(self):
        """AuthenticatedUser should store username."""
        user = AuthenticatedUser(username="testuser")

        assert user.username == "testuser"
        assert user.display_name == "testuser"

    def test_authenticated_user_equality(self):
        """AuthenticatedUser with same username should be equal."""
        assert AuthenticatedUser(username="admin") == AuthenticatedUser(username="admin")

    def test_authenticated_user_inequality(self):
        """AuthenticatedUser with different username should not be equal."""
        assert AuthenticatedUser(username="admin") != AuthenticatedUser(username="other")


class TestJobEndpointsRequireAuth:
    """The job endpoints reject requests without valid operator credentials."""

    @pytest.fixture
    def client(self, job_manager):
        app.dependency_overrides[get_settings] = lambda: Settings(
            webapp_username="operator", webapp_password="s3cret"
        )
        app.dependency_overrides[get_job_manager] = lambda: job_manager
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_missing_credentials(self, client):
        response = client.delete("/jobs", params={"ids": "job-1"})

        assert response.status_code == 401

    def test_wrong_password(self, client):
        response = client.post("/jobs/export", auth=("operator", "wrong"))

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="job-archive"'
        assert response.json()["detail"] == "Job archive operator credentials required"

    def test_valid_credentials(self, client, seeded_hub):
        response = client.delete("/jobs", params={"ids": "job-1001"}, auth=("operator", "s3cret"))

        assert response.status_code == 200
        assert response.json()["totalCount"] == 1
