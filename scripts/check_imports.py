#!/usr/bin/env python3
"""Check hexagonal architecture import boundaries of the lobbysync package.

Layering rules:
- domain/: pure models and reducers, NO imports from other lobbysync layers
- config/: configuration values, may import from domain/
- application/: ports and services, may import from domain/ and config/
- infrastructure/: adapters and stubs, may import from domain/, config/
  and application/
- bootstrap/: composition root, may import from every layer

Usage:
    python scripts/check_imports.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import ast
import sys
from pathlib import Path

PACKAGE = "lobbysync"

# What each layer CAN import from (besides itself)
ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "config": {"domain"},
    "application": {"domain", "config"},
    "infrastructure": {"domain", "config", "application"},
    "bootstrap": {"domain", "config", "application", "infrastructure"},
}

Violation = tuple[str, int, str]


def get_import_modules(node: ast.Import | ast.ImportFrom) -> list[str]:
    """Extract every absolute module name an import statement pulls in."""
    if isinstance(node, ast.ImportFrom):
        if node.level:
            return []
        return [node.module] if node.module else []
    return [alias.name for alias in node.names]


def _get_file_layer(py_file: Path, package_dir: Path) -> str | None:
    """Determine the layer of a file from its first path component.

    Args:
        py_file: Path to the Python file
        package_dir: Path to the lobbysync package directory

    Returns:
        The layer name or None for files outside any layer
    """
    try:
        parts = py_file.relative_to(package_dir).parts
    except ValueError:
        return None
    if len(parts) < 2:
        return None
    return parts[0] if parts[0] in ALLOWED_IMPORTS else None


def _parse_file(py_file: Path) -> ast.Module | None:
    try:
        source = py_file.read_text(encoding="utf-8")
        return ast.parse(source, filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return None


def _check_import_violation(module: str, file_layer: str) -> str | None:
    """Return an error message if importing module breaks the layer rules."""
    module_parts = module.split(".")
    if module_parts[0] != PACKAGE or len(module_parts) < 2:
        return None

    target_layer = module_parts[1]
    if target_layer not in ALLOWED_IMPORTS or target_layer == file_layer:
        return None

    if target_layer not in ALLOWED_IMPORTS[file_layer]:
        return f"{file_layer} layer cannot import from {target_layer}"
    return None


def check_file_imports(py_file: Path, package_dir: Path) -> list[Violation]:
    """Check a single file for import boundary violations.

    Returns:
        List of (file_path, line_number, violation_message) tuples
    """
    file_layer = _get_file_layer(py_file, package_dir)
    if file_layer is None:
        return []

    tree = _parse_file(py_file)
    if tree is None:
        return []

    violations: list[Violation] = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            for module in get_import_modules(node):
                error_msg = _check_import_violation(module, file_layer)
                if error_msg:
                    violations.append((str(py_file), node.lineno, error_msg))
    return violations


def check_import_boundaries(package_dir: Path) -> list[Violation]:
    """Check every Python file under package_dir."""
    violations: list[Violation] = []

    if not package_dir.exists():
        print(
            f"Error: Package directory '{package_dir}' does not exist",
            file=sys.stderr,
        )
        return violations

    for py_file in sorted(package_dir.rglob("*.py")):
        violations.extend(check_file_imports(py_file, package_dir))
    return violations


def format_violations(violations: list[Violation]) -> str:
    """Format violations for human-readable output."""
    if not violations:
        return ""

    lines = ["Import boundary violations found:", ""]
    for file_path, line_no, message in sorted(violations):
        lines.append(f"  {file_path}:{line_no}: {message}")
    lines.append("")
    lines.append(f"Total: {len(violations)} violation(s)")
    return "\n".join(lines)


def main() -> int:
    """Main entry point.

    Returns:
        0 if no violations, 1 if violations found
    """
    if len(sys.argv) > 1:
        package_dir = Path(sys.argv[1])
    else:
        package_dir = Path(__file__).parent.parent / PACKAGE

    violations = check_import_boundaries(package_dir)

    if violations:
        print(format_violations(violations))
        return 1
    print("No import boundary violations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
