"""Architecture enforcement tests for the gateway's layering constraints.

This module provides lightweight, repository-local invariants to ensure that
the framework-agnostic core (``fanout_gateway/base`` and
``fanout_gateway/orchestration``) stays decoupled from the FastAPI service
layer. It focuses on import boundaries only and is designed to fail fast if a
forbidden dependency is introduced.

Rules validated here:
1) Core modules must not import ``fastapi``, ``starlette`` or ``uvicorn``.
2) Core modules must not import ``fanout_gateway.service``.

These tests are intentionally static-file scans to avoid import-time side
effects, and they emit clear failure messages for quick remediation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIRS = ("base", "orchestration")
FORBIDDEN_SNIPPETS = (
    "import fastapi",
    "from fastapi",
    "import starlette",
    "from starlette",
    "import uvicorn",
    "from uvicorn",
    "fanout_gateway.service",
    "from ..service",
    "from ...service",
)


def _iter_python_files(root: Path) -> Iterable[Path]:
    """Yield all Python source files under a root directory, skipping caches."""

    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts:
            continue
        yield path


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def test_core_does_not_import_service_layer() -> None:
    """Ensure core modules do not import presentation/service layers.

    Failure mode
    ------------
    The test fails with a clear message listing offending files and the
    matched forbidden import.
    """

    package_root = REPO_ROOT / "fanout_gateway"
    if not package_root.is_dir():
        pytest.skip("fanout_gateway package not found; skipping boundary check")

    offenders: List[str] = []
    for name in CORE_DIRS:
        for py in _iter_python_files(package_root / name):
            src = _read_text(py)
            offenders.extend(f"{py}: contains '{s}'" for s in FORBIDDEN_SNIPPETS if s in src)

    if offenders:
        pytest.fail("Core modules must not import the service layer.\n" + "\n".join(offenders))


def test_core_modules_declare_public_api() -> None:
    """Every non-package core module lists its exports in ``__all__``."""

    package_root = REPO_ROOT / "fanout_gateway"
    missing = [
        str(py)
        for name in CORE_DIRS
        for py in _iter_python_files(package_root / name)
        if py.name != "__init__.py" and "__all__" not in _read_text(py)
    ]
    assert missing == [], f"Modules without __all__: {missing}"  # nosec B101
