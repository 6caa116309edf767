"""System-level static checks for layer dependency direction.

Shared packages sit at the bottom, then substrates, then services, then the
core composition root, then actors. Imports may only point downward.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.shared.static_analysis_helpers import (
    discover_runtime_python_files,
    imports_for_source,
    is_equal_or_child,
    module_name_for_file,
    resolve_import_from_base,
)

_REPO_ROOT = Path(__file__).resolve().parents[2]

# Ordered low -> high.
_LAYERS = (
    ("packages.fieldlog_shared",),
    ("resources",),
    ("services",),
    ("packages.fieldlog_core",),
    ("actors",),
)


def _layer_of(module_name: str) -> int | None:
    for index, prefixes in enumerate(_LAYERS):
        if any(is_equal_or_child(module_name, prefix) for prefix in prefixes):
            return index
    return None


def test_runtime_imports_only_point_to_same_or_lower_layers() -> None:
    violations: list[str] = []
    for file_path in discover_runtime_python_files(repo_root=_REPO_ROOT):
        caller = module_name_for_file(repo_root=_REPO_ROOT, file_path=file_path)
        caller_layer = _layer_of(caller)
        if caller_layer is None:
            continue
        imports = imports_for_source(
            source=file_path.read_text(encoding="utf-8"),
            caller_module=caller,
            is_package=file_path.name == "__init__.py",
        )
        for ref in imports:
            target_layer = _layer_of(ref.module_name)
            if target_layer is not None and target_layer > caller_layer:
                violations.append(
                    f"{file_path.relative_to(_REPO_ROOT)}:{ref.line}: "
                    f"{caller} imports higher-layer {ref.module_name}"
                )

    assert not violations, "\n".join(violations)


def test_runtime_code_has_no_dynamic_imports() -> None:
    offenders: list[str] = []
    for file_path in discover_runtime_python_files(repo_root=_REPO_ROOT):
        caller = module_name_for_file(repo_root=_REPO_ROOT, file_path=file_path)
        source = file_path.read_text(encoding="utf-8")
        for ref in imports_for_source(source=source, caller_module=caller):
            if is_equal_or_child(ref.module_name, "importlib"):
                offenders.append(f"{file_path.relative_to(_REPO_ROOT)}:{ref.line}")
        if "__import__(" in source:
            offenders.append(f"{file_path.relative_to(_REPO_ROOT)}: __import__")

    assert not offenders, "\n".join(offenders)


@pytest.mark.parametrize(
    ("caller", "level", "module", "is_package", "expected"),
    [
        ("services.state.ias.data.repository", 1, "schema", False, "services.state.ias.data.schema"),
        ("services.state.ias.data", 1, "schema", True, "services.state.ias.data.schema"),
        ("services.state.ias.data.repository", 2, None, False, "services.state.ias"),
        ("actors.cli.main", 0, "typer", False, "typer"),
    ],
)
def test_relative_import_resolution(
    caller: str, level: int, module: str | None, is_package: bool, expected: str
) -> None:
    assert (
        resolve_import_from_base(
            caller_module=caller, level=level, module=module, is_package=is_package
        )
        == expected
    )
