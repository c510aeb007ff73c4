"""Tests to enforce hexagonal architecture boundaries."""

import ast
from pathlib import Path
from typing import Dict, List, Set

import pytest

PACKAGE_ROOT = Path(__file__).parent.parent.parent / "saved_searches"


class ImportVisitor(ast.NodeVisitor):
    """AST visitor to collect import statements, excluding TYPE_CHECKING blocks."""

    def __init__(self):
        self.imports: Set[str] = set()

    def visit_If(self, node):
        if isinstance(node.test, ast.Name) and node.test.id == "TYPE_CHECKING":
            return
        self.generic_visit(node)

    def visit_Import(self, node):
        for alias in node.names:
            self.imports.add(alias.name)

    def visit_ImportFrom(self, node):
        if node.module:
            self.imports.add(node.module)


def get_imports_from_file(file_path: Path) -> Set[str]:
    """Extract imports from a Python file."""
    tree = ast.parse(file_path.read_text(encoding="utf-8"))
    visitor = ImportVisitor()
    visitor.visit(tree)
    return visitor.imports


def get_python_files(directory: Path) -> List[Path]:
    """Get all Python files in a directory recursively."""
    if not directory.exists():
        return []
    return sorted(directory.rglob("*.py"))


def find_violations(layer: str, forbidden_prefixes: List[str]) -> List[str]:
    violations = []
    for file_path in get_python_files(PACKAGE_ROOT / layer):
        for import_stmt in get_imports_from_file(file_path):
            if any(import_stmt.startswith(prefix) for prefix in forbidden_prefixes):
                relative_path = file_path.relative_to(PACKAGE_ROOT)
                violations.append(f"{relative_path}: imports {import_stmt}")
    return violations


LAYER_RULES: Dict[str, List[str]] = {
    "domain": [
        "saved_searches.application",
        "saved_searches.infrastructure",
        "saved_searches.database",
        "saved_searches.services",
        "saved_searches.api",
        "saved_searches.core",
        "sqlmodel",
        "sqlalchemy",
        "fastapi",
        "httpx",
    ],
    "application": [
        "saved_searches.infrastructure",
        "saved_searches.database",
        "saved_searches.services",
        "saved_searches.api",
        "sqlmodel",
        "sqlalchemy",
        "fastapi",
    ],
    "infrastructure": [
        "saved_searches.api",
    ],
}


class TestHexagonalBoundaries:
    """Test hexagonal architecture boundary violations."""

    @pytest.mark.parametrize("layer", sorted(LAYER_RULES))
    def test_layer_imports_respect_boundaries(self, layer):
        violations = find_violations(layer, LAYER_RULES[layer])

        if violations:
            pytest.fail(
                f"{layer} layer boundary violations found:\n" + "\n".join(violations)
            )

    def test_api_reaches_services_through_providers(self):
        """The API never builds repositories or adapters itself."""
        violations = find_violations(
            "api",
            [
                "saved_searches.infrastructure.persistence",
                "saved_searches.infrastructure.adapters",
                "saved_searches.infrastructure.notifications",
                "saved_searches.database",
            ],
        )

        if violations:
            pytest.fail("Provider pattern violations found:\n" + "\n".join(violations))

    def test_every_port_has_an_implementation(self):
        implemented: Set[str] = set()
        for file_path in get_python_files(PACKAGE_ROOT / "infrastructure"):
            tree = ast.parse(file_path.read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if isinstance(node, ast.ClassDef):
                    implemented.update(
                        base.id for base in node.bases if isinstance(base, ast.Name)
                    )

        ports = {
            "ISavedSearchRepository",
            "IKnownResultRepository",
            "ISavedSearchTypeRepository",
            "IQueryExecutor",
            "IMailTransport",
            "INotificationPlugin",
            "INotificationPluginFactory",
            "ISearchLock",
        }
        assert ports <= implemented


class TestDomainModelPurity:
    """Test domain model purity and isolation."""

    def test_value_objects_are_frozen_dataclasses(self):
        tree = ast.parse((PACKAGE_ROOT / "domain" / "value_objects.py").read_text(encoding="utf-8"))

        for node in tree.body:
            if not isinstance(node, ast.ClassDef):
                continue
            frozen = [
                decorator
                for decorator in node.decorator_list
                if isinstance(decorator, ast.Call)
                and any(kw.arg == "frozen" and getattr(kw.value, "value", False) for kw in decorator.keywords)
            ]
            assert frozen, f"{node.name} should be a frozen dataclass"
