"""Bearer credential checks for write operations.

The gate is a pure capability check: it maps a presented credential to an
Authorized identity or an Unauthorized result. Services never see credentials;
the HTTP layer runs the gate before calling them.
"""

import hashlib
import hmac
from dataclasses import dataclass


@dataclass(frozen=True)
class Authorized:
    """A caller holding a valid credential.

    Attributes:
        identity: Stable fingerprint of the matched credential
    """

    identity: str


@dataclass(frozen=True)
class Unauthorized:
    """A rejected credential."""

    reason: str


def fingerprint(credential: str) -> str:
    """Short non-reversible label for a credential, safe to log."""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()[:12]


class CredentialGate:
    """Validates bearer credentials against a fixed set of accepted tokens."""

    def __init__(self, credentials: list[str]) -> None:
        """Initialize gate with the accepted credentials.

        Args:
            credentials: Accepted token strings; blanks are ignored

        Raises:
            ValueError: If no non-blank credential is provided
        """
        accepted = [credential for credential in credentials if credential]
        if not accepted:
            raise ValueError("At least one credential must be provided")

        self._credentials = [credential.encode("utf-8") for credential in dict.fromkeys(accepted)]

    def check(self, credential: str | None) -> Authorized | Unauthorized:
        """Check a presented credential.

        Every accepted credential is compared in constant time.

        Args:
            credential: The presented token, or None if absent

        Returns:
            Authorized with the caller identity, or Unauthorized with a reason
        """
        if not credential:
            return Unauthorized("Missing credential")

        presented = credential.encode("utf-8")
        matched = False
        for accepted in self._credentials:
            matched |= hmac.compare_digest(presented, accepted)

        if not matched:
            return Unauthorized("Invalid credential")
        return Authorized(identity=fingerprint(credential))
