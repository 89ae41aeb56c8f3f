"""Unit tests for bearer credential checks."""

import pytest

from canteen_service.auth.credential_gate import (
    Authorized,
    CredentialGate,
    Unauthorized,
    fingerprint,
)


@pytest.mark.unit
class TestCredentialGate:
    """Test suite for CredentialGate."""

    def test_gate_initialization_with_empty_list_raises_error(self) -> None:
        """Test that initializing with no credentials raises ValueError."""
        with pytest.raises(ValueError, match="At least one credential must be provided"):
            CredentialGate(credentials=[])

    def test_gate_ignores_blank_credentials(self) -> None:
        with pytest.raises(ValueError):
            CredentialGate(credentials=["", ""])

    def test_check_authorizes_valid_credential(self) -> None:
        gate = CredentialGate(credentials=["admin-key", "token-key"])

        result = gate.check("token-key")

        assert result == Authorized(identity=fingerprint("token-key"))

    def test_check_rejects_invalid_credential(self) -> None:
        gate = CredentialGate(credentials=["admin-key"])

        assert gate.check("admin-key-2") == Unauthorized("Invalid credential")

    @pytest.mark.parametrize("credential", [None, ""])
    def test_check_rejects_missing_credential(self, credential: str | None) -> None:
        gate = CredentialGate(credentials=["admin-key"])

        assert gate.check(credential) == Unauthorized("Missing credential")

    def test_check_is_case_sensitive(self) -> None:
        gate = CredentialGate(credentials=["Admin-Key"])

        assert isinstance(gate.check("admin-key"), Unauthorized)

    def test_fingerprint_does_not_leak_credential(self) -> None:
        label = fingerprint("super-secret")

        assert len(label) == 12
        assert "secret" not in label
        assert label == fingerprint("super-secret")
