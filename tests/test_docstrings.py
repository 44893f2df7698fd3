"""Tests that every class and function in hwscope carries a docstring."""

import ast
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parent.parent / "src" / "hwscope"


def _missing_docstrings(py_path: Path) -> list[str]:
    """Qualified names of classes and functions without a docstring."""
    tree = ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))
    missing: list[str] = []

    def visit(node: ast.AST, prefix: str) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                qualname = f"{prefix}{child.name}"
                if ast.get_docstring(child) is None:
                    missing.append(f"{py_path.name}:{child.lineno} {qualname}")
                visit(child, f"{qualname}.")

    visit(tree, "")
    return missing


def test_source_tree_found():
    """Test the package sources are where the check expects them."""
    assert sorted(p.name for p in SRC_ROOT.glob("*.py"))


def test_every_definition_has_docstring():
    """Test classes, functions, methods and properties all have docstrings."""
    missing = [name for path in sorted(SRC_ROOT.glob("*.py")) for name in _missing_docstrings(path)]
    assert missing == []
