"""FastAPI dependencies for credential checks.

Provides the dependency that mutating endpoints use to require a valid bearer
credential before any service is called.
"""

import logging
from typing import Annotated

from fastapi import Header, HTTPException

from canteen_service.auth.credential_gate import Authorized, CredentialGate

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_credential(authorization: str | None, x_api_key: str | None) -> str | None:
    """Pull the credential from an Authorization bearer header or X-API-Key.

    Returns:
        The credential, or None if neither header carries one
    """
    if authorization and authorization[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
        token = authorization[len(BEARER_PREFIX) :].strip()
        if token:
            return token
    return x_api_key or None


def require_credential(
    authorization: Annotated[str | None, Header()] = None,
    x_api_key: Annotated[str | None, Header()] = None,
    gate: CredentialGate | None = None,
) -> Authorized:
    """FastAPI dependency that admits only callers with a valid credential.

    Args:
        authorization: Authorization header (injected by FastAPI)
        x_api_key: X-API-Key header (injected by FastAPI)
        gate: CredentialGate to check against

    Returns:
        Authorized: The caller identity

    Raises:
        HTTPException: 401 if the credential is missing or invalid
    """
    if gate is None:
        raise HTTPException(status_code=401, detail="Credential checks are not configured")

    result = gate.check(extract_credential(authorization, x_api_key))
    if not isinstance(result, Authorized):
        logger.info(f"Rejected write request: {result.reason}")
        raise HTTPException(status_code=401, detail=result.reason)

    return result
