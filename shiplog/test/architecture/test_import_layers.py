"""Layering rules: lower layers never import higher ones.

    core -> platform/output -> git -> changelog -> providers -> release -> cli
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

import pytest

_ABOVE_CORE = (
    "shiplog.platform",
    "shiplog.output",
    "shiplog.git",
    "shiplog.changelog",
    "shiplog.providers",
    "shiplog.release",
    "shiplog.cli",
)

_LAYERS: dict[str, tuple[str, ...]] = {
    "core": _ABOVE_CORE,
    "platform": _ABOVE_CORE[2:],
    "output": _ABOVE_CORE[2:],
    "git": _ABOVE_CORE[3:],
    "changelog": _ABOVE_CORE[4:],
    "providers": ("shiplog.release.run", "shiplog.release.resolve", "shiplog.cli"),
    "release": ("shiplog.cli",),
}


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def _package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _iter_python_files(base: Path) -> list[Path]:
    return [
        path
        for path in sorted(base.rglob("*.py"))
        if "__pycache__" not in path.parts and "test" not in path.relative_to(base).parts
    ]


def _parse_imports(path: Path) -> list[ImportRef]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imports: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(module=alias.name, line=node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            imports.append(ImportRef(module=node.module, line=node.lineno))
    return imports


def _matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


@pytest.mark.parametrize("layer", sorted(_LAYERS))
def test_layer_does_not_import_upwards(layer: str) -> None:
    root = _package_root()
    offenders: list[str] = []

    for file_path in _iter_python_files(root / layer):
        rel = file_path.relative_to(root)
        for item in _parse_imports(file_path):
            for forbidden in _LAYERS[layer]:
                if _matches_prefix(item.module, forbidden):
                    offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} layering violations:\n" + "\n".join(offenders)


def test_only_output_and_cli_use_rich() -> None:
    root = _package_root()
    offenders: list[str] = []

    for file_path in _iter_python_files(root):
        rel = file_path.relative_to(root)
        if rel.parts[0] in {"output", "cli"}:
            continue
        for item in _parse_imports(file_path):
            if _matches_prefix(item.module, "rich"):
                offenders.append(f"{rel}:{item.line}: '{item.module}'")

    assert not offenders, "rich used outside output/cli:\n" + "\n".join(offenders)


def test_subprocess_only_in_platform() -> None:
    root = _package_root()
    offenders: list[str] = []

    for file_path in _iter_python_files(root):
        rel = file_path.relative_to(root)
        if rel.parts[0] == "platform":
            continue
        for item in _parse_imports(file_path):
            if item.module == "subprocess":
                offenders.append(f"{rel}:{item.line}")

    assert not offenders, "subprocess used outside platform:\n" + "\n".join(offenders)
