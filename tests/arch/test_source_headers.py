# tests/arch/test_source_headers.py
from __future__ import annotations

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_ROOT = PROJECT_ROOT / "src" / "counsel_core"

COPYRIGHT_LINE = "# Copyright (c) Counsel Core."
LICENSE_LINE = "# SPDX-License-Identifier: MIT"


def test_source_files_carry_path_and_license_header() -> None:
    violations: list[str] = []

    for path in sorted(SRC_ROOT.rglob("*.py")):
        if path.name == "__init__.py" and not path.read_text(encoding="utf-8").strip():
            continue
        lines = path.read_text(encoding="utf-8").splitlines()[:3]
        expected = [
            f"# {path.relative_to(PROJECT_ROOT).as_posix()}",
            COPYRIGHT_LINE,
            LICENSE_LINE,
        ]
        if lines != expected:
            violations.append(f"{path.relative_to(PROJECT_ROOT)}: {lines!r}")

    if violations:
        raise AssertionError("Missing or stale source headers:\n" + "\n".join(violations))
