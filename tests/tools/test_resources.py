from __future__ import annotations

from pathlib import Path

import pytest

from mcp_log_forensics.resources.registry import resolve_resource_path


@pytest.fixture
def base_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    base = tmp_path / "base"
    base.mkdir()
    monkeypatch.setenv("LOG_FORENSICS_BASE_DIR", str(base))
    return base


def test_resolves_allowed_file_under_base(base_dir: Path) -> None:
    log = base_dir / "app.log"
    log.write_text("INFO ok\n", encoding="utf-8")
    assert resolve_resource_path("app.log") == log.resolve()


def test_parent_traversal_is_rejected(base_dir: Path) -> None:
    (base_dir.parent / "secret.log").write_text("ERROR secret\n", encoding="utf-8")
    with pytest.raises(ValueError, match="escapes base dir"):
        resolve_resource_path("../secret.log")


def test_absolute_path_outside_base_is_rejected(base_dir: Path) -> None:
    outside = base_dir.parent / "other.log"
    outside.write_text("INFO x\n", encoding="utf-8")
    with pytest.raises(ValueError, match="escapes base dir"):
        resolve_resource_path(str(outside))


def test_disallowed_suffix_is_rejected(base_dir: Path) -> None:
    (base_dir / "data.csv").write_text("a,b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="File type not allowed"):
        resolve_resource_path("data.csv")


def test_gzipped_log_suffix_is_allowed(base_dir: Path) -> None:
    gz = base_dir / "app.log.gz"
    gz.write_bytes(b"")
    assert resolve_resource_path("app.log.gz") == gz.resolve()


def test_missing_file_raises(base_dir: Path) -> None:
    with pytest.raises(FileNotFoundError):
        resolve_resource_path("absent.log")
