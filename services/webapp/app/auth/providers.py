# =============================================================================
# Authentication Providers
# =============================================================================
# HTTP Basic Auth for the operators allowed to delete, export and import jobs.
# =============================================================================

import secrets
from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthenticatedUser:
    """An operator who passed authentication."""

    username: str
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.username


class BasicAuthProvider:
    """Checks a username / password pair against the configured operator account."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    def authenticate(self, username: Optional[str], password: Optional[str]) -> Optional[AuthenticatedUser]:
        """
        Return the operator when both values match, otherwise None.

        Empty or missing values never authenticate. Comparison is constant-time.
        """
        if not username or not password:
            return None

        username_ok = secrets.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = secrets.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        if username_ok and password_ok:
            return AuthenticatedUser(username=username)
        return None
