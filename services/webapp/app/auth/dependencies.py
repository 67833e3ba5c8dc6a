# =============================================================================
# Authentication Dependencies
# =============================================================================
# Guards the job archive endpoints with the configured operator account.
# =============================================================================

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.auth.providers import AuthenticatedUser, BasicAuthProvider
from app.config import Settings, get_settings

operator_credentials = HTTPBasic(realm="job-archive")


def get_auth_provider(settings: Settings = Depends(get_settings)) -> BasicAuthProvider:
    return BasicAuthProvider(
        username=settings.webapp_username,
        password=settings.webapp_password,
    )


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(operator_credentials),
    auth_provider: BasicAuthProvider = Depends(get_auth_provider),
) -> AuthenticatedUser:
    """
    Resolve the operator allowed to delete, export and import jobs.

    Raises:
        HTTPException: 401 when the credentials do not match the operator
            account (WEBAPP_USERNAME / WEBAPP_PASSWORD).
    """
    operator = auth_provider.authenticate(credentials.username, credentials.password)
    if operator is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Job archive operator credentials required",
            headers={"WWW-Authenticate": 'Basic realm="job-archive"'},
        )
    return operator
