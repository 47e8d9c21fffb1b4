"""Architecture enforcement tests for the layered package layout.

``pagechat.base`` is the inner layer (session engine, context manager,
transport, models). It must stay importable without the configuration layer
or the service/CLI layer so the engine can be embedded on its own.

Rules validated here:
1) Modules under ``pagechat/base`` never import ``pagechat.config`` or
   ``pagechat.service`` (absolute or relative form).
2) ``pagechat/config`` never imports ``pagechat.service``.

These tests are static-file scans to avoid import-time side effects, and they
emit clear failure messages for quick remediation.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, List, Tuple

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_ROOT = REPO_ROOT / "pagechat"


def _iter_python_files(root: Path) -> Iterable[Path]:
    """Yield all Python source files under ``root``, skipping caches and tests."""

    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts or "tests" in path.relative_to(root).parts:
            continue
        yield path


def _module_name(path: Path) -> Tuple[str, bool]:
    """Return the dotted module name for ``path`` and whether it is a package."""

    rel = path.relative_to(REPO_ROOT).with_suffix("")
    parts = list(rel.parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def _imported_modules(path: Path) -> List[str]:
    """Return absolute names of every module imported by ``path``.

    Relative imports are resolved against the module's own package.
    """

    module, is_package = _module_name(path)
    package = module if is_package else module.rpartition(".")[0]
    tree = ast.parse(path.read_text(encoding="utf-8", errors="replace"), filename=str(path))
    found: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                base = package.split(".")
                base = base[: len(base) - (node.level - 1)]
                target = ".".join(base + ([node.module] if node.module else []))
            else:
                target = node.module or ""
            found.append(target)
    return found


def _offenders(layer: str, forbidden: Tuple[str, ...]) -> List[str]:
    root = PACKAGE_ROOT / layer
    if not root.is_dir():
        pytest.skip(f"{root} not found; skipping boundary check")
    out: List[str] = []
    for py in _iter_python_files(root):
        for name in _imported_modules(py):
            if any(name == f or name.startswith(f + ".") for f in forbidden):
                out.append(f"{py.relative_to(REPO_ROOT)}: imports '{name}'")
    return out


def test_base_does_not_import_outer_layers() -> None:
    offenders = _offenders("base", ("pagechat.config", "pagechat.service"))
    if offenders:
        pytest.fail("pagechat.base must not import config or service layers.\n" + "\n".join(offenders))


def test_config_does_not_import_service() -> None:
    offenders = _offenders("config", ("pagechat.service",))
    if offenders:
        pytest.fail("pagechat.config must not import the service layer.\n" + "\n".join(offenders))
