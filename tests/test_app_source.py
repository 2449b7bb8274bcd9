"""Static checks on the Streamlit script, which only runs under `streamlit run`."""

import ast
import importlib
from pathlib import Path

import pytest

_APP = Path(__file__).parent.parent / "src" / "fastingtimes" / "app.py"
_TREE = ast.parse(_APP.read_text(encoding="utf-8"))


def _keywords():
    for node in ast.walk(_TREE):
        if isinstance(node, ast.Call):
            yield from (kw.arg for kw in node.keywords)


def _called_names():
    for node in ast.walk(_TREE):
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
            yield node.func.id


def test_no_deprecated_container_width():
    assert "use_container_width" not in set(_keywords())


def test_gps_refinement_uses_the_shared_step():
    called = set(_called_names())
    assert {"take_sample", "settle", "observer_from_fix", "requested_days"} <= called
    assert "best_fix" not in called


@pytest.mark.parametrize(
    "node",
    [
        n
        for n in ast.walk(_TREE)
        if isinstance(n, ast.ImportFrom) and (n.module or "").startswith("fastingtimes")
    ],
    ids=lambda n: n.module,
)
def test_imported_names_exist(node):
    module = importlib.import_module(node.module)
    for alias in node.names:
        assert hasattr(module, alias.name), f"{node.module}.{alias.name}"
