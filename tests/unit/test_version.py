"""Unit tests for package version resolution and ``--version``."""

from __future__ import annotations

import importlib.metadata
import importlib.util
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import pytest

import repogrep
from repogrep.cli import build_parser

INIT_PATH = Path(__file__).resolve().parents[2] / "src" / "repogrep" / "__init__.py"


def _installed_version() -> str:
    try:
        return version("repogrep")
    except PackageNotFoundError:
        return "0.0.0+unknown"


def test_version_from_metadata_or_fallback() -> None:
    assert repogrep.__version__ == _installed_version()


def test_missing_metadata_warns_and_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    def _not_installed(_name: str) -> str:
        raise PackageNotFoundError

    monkeypatch.setattr(importlib.metadata, "version", _not_installed)

    spec = importlib.util.spec_from_file_location("repogrep_fallback_version", INIT_PATH)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)

    with pytest.warns(RuntimeWarning, match="Package metadata for 'repogrep' not found"):
        spec.loader.exec_module(module)

    assert module.__version__ == "0.0.0+unknown"


def test_cli_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == f"repogrep {repogrep.__version__}"
