"""Unit tests for macOS sameuserproof discovery."""

import os
from pathlib import Path

import pytest

from tailscale_localapi.core.exceptions import CredentialDiscoveryError
from tailscale_localapi.transport.credentials import SameUserProof, read_sameuserproof


def _make_shared_dir(root: Path, link_target: str, token: str | None = None) -> Path:
    os.symlink(link_target, root / "ipnport")
    if token is not None:
        (root / f"sameuserproof-{link_target}").write_text(token, encoding="utf-8")
    return root


class TestReadSameUserProof:
    """Test reading the ipnport symlink and token file."""

    def test_reads_port_and_token(self, tmp_path: Path) -> None:
        shared = _make_shared_dir(tmp_path, "12345", "  deadbeef\n")

        proof = read_sameuserproof(shared)

        assert proof == SameUserProof(port=12345, token="deadbeef")

    def test_token_masked_in_repr(self, tmp_path: Path) -> None:
        proof = read_sameuserproof(_make_shared_dir(tmp_path, "12345", "deadbeef"))
        assert "deadbeef" not in repr(proof)
        assert "12345" in repr(proof)

    def test_missing_symlink(self, tmp_path: Path) -> None:
        with pytest.raises(CredentialDiscoveryError, match="Failed to read credentials"):
            read_sameuserproof(tmp_path)

    def test_regular_file_instead_of_symlink(self, tmp_path: Path) -> None:
        (tmp_path / "ipnport").write_text("12345", encoding="utf-8")
        with pytest.raises(CredentialDiscoveryError):
            read_sameuserproof(tmp_path)

    @pytest.mark.parametrize("target", ["abc", "12a", "-1", "0", "70000"])
    def test_invalid_port(self, tmp_path: Path, target: str) -> None:
        _make_shared_dir(tmp_path, target, "deadbeef")

        with pytest.raises(CredentialDiscoveryError, match="Invalid port number") as exc_info:
            read_sameuserproof(tmp_path)

        assert exc_info.value.shared_dir == str(tmp_path)

    def test_missing_token_file(self, tmp_path: Path) -> None:
        _make_shared_dir(tmp_path, "12345")
        with pytest.raises(CredentialDiscoveryError, match="sameuserproof-12345"):
            read_sameuserproof(tmp_path)

    def test_empty_token(self, tmp_path: Path) -> None:
        _make_shared_dir(tmp_path, "12345", "  \n")
        with pytest.raises(CredentialDiscoveryError, match="Empty auth token"):
            read_sameuserproof(tmp_path)
