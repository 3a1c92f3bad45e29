"""Unit tests for repogrep.inspectors."""

from __future__ import annotations

import json

from repogrep.inspectors import FOUND, contains, decode_utf8, lockfile_version


def _lock_v2(**packages: str) -> str:
    return json.dumps(
        {
            "name": "app",
            "lockfileVersion": 2,
            "packages": {
                "": {"name": "app"},
                **{f"node_modules/{name}": {"version": v} for name, v in packages.items()},
            },
        }
    )


class TestLockfileVersion:
    def test_v2_packages_map(self) -> None:
        assert lockfile_version(_lock_v2(**{"left-pad": "1.3.0"}), "left-pad") == "1.3.0"

    def test_v3_packages_map(self) -> None:
        text = json.dumps(
            {"lockfileVersion": 3, "packages": {"node_modules/react": {"version": "18.2.0"}}}
        )
        assert lockfile_version(text, "react") == "18.2.0"

    def test_v2_missing_package(self) -> None:
        assert lockfile_version(_lock_v2(lodash="4.17.21"), "left-pad") is None

    def test_v1_dependencies_map(self) -> None:
        text = json.dumps(
            {"lockfileVersion": 1, "dependencies": {"left-pad": {"version": "1.1.3"}}}
        )
        assert lockfile_version(text, "left-pad") == "1.1.3"

    def test_v1_falls_back_to_packages(self) -> None:
        text = json.dumps(
            {
                "lockfileVersion": 1,
                "dependencies": {},
                "packages": {"node_modules/left-pad": {"version": "1.2.0"}},
            }
        )
        assert lockfile_version(text, "left-pad") == "1.2.0"

    def test_v2_ignores_dependencies_map(self) -> None:
        text = json.dumps(
            {"lockfileVersion": 2, "dependencies": {"left-pad": {"version": "0.0.1"}}}
        )
        assert lockfile_version(text, "left-pad") is None

    def test_scoped_package(self) -> None:
        assert lockfile_version(_lock_v2(**{"@types/node": "20.1.0"}), "@types/node") == "20.1.0"

    def test_nested_install_path_not_matched(self) -> None:
        text = json.dumps(
            {
                "lockfileVersion": 2,
                "packages": {"node_modules/a/node_modules/left-pad": {"version": "1.0.0"}},
            }
        )
        assert lockfile_version(text, "left-pad") is None

    def test_entry_without_version(self) -> None:
        text = json.dumps({"lockfileVersion": 2, "packages": {"node_modules/left-pad": {}}})
        assert lockfile_version(text, "left-pad") is None

    def test_invalid_json(self) -> None:
        assert lockfile_version("{not json", "left-pad") is None

    def test_non_object_json(self) -> None:
        assert lockfile_version("[1, 2]", "left-pad") is None


class TestContains:
    def test_substring_present(self) -> None:
        assert contains("const x = eval(input)", "eval(") == FOUND

    def test_substring_absent(self) -> None:
        assert contains("const x = safe(input)", "eval(") is None

    def test_case_sensitive(self) -> None:
        assert contains("EVAL(", "eval(") is None


class TestDecodeUtf8:
    def test_valid(self) -> None:
        assert decode_utf8("héllo".encode()) == "héllo"

    def test_invalid_bytes(self) -> None:
        assert decode_utf8(b"\xff\xfe\x00bad") is None
