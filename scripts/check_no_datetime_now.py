#!/usr/bin/env python3
"""Pre-commit hook to prevent direct datetime.now() calls in the package.

Presence filtering, heartbeats and countdowns must all read the injected
TimeAuthorityProtocol so tests can drive them with FakeTimeAuthority.

Usage:
    python scripts/check_no_datetime_now.py

Exit codes:
    0: No violations found
    1: Violations found - datetime.now() detected outside the clock adapter
"""

import re
import sys
from pathlib import Path

# Matches: datetime.now(), datetime.utcnow()
DATETIME_NOW_PATTERN = re.compile(r"datetime\s*\.\s*(now|utcnow)\s*\(", re.MULTILINE)

PACKAGE_DIR = Path("lobbysync")

# The only file allowed to read the wall clock directly
ALLOWED_FILES = {
    PACKAGE_DIR / "infrastructure" / "adapters" / "time" / "system_time_authority.py",
}


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Check a single file for datetime.now() violations.

    Args:
        file_path: Path to the Python file to check.

    Returns:
        List of (line_number, line_content) tuples for violations.
    """
    violations: list[tuple[int, str]] = []

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return violations

    for line_num, line in enumerate(content.splitlines(), start=1):
        if line.lstrip().startswith("#"):
            continue
        if DATETIME_NOW_PATTERN.search(line):
            violations.append((line_num, line.strip()))

    return violations


def main() -> int:
    """Main entry point for the pre-commit hook.

    Returns:
        Exit code: 0 for success, 1 for violations found.
    """
    if not PACKAGE_DIR.exists():
        print(f"Warning: {PACKAGE_DIR}/ directory not found, skipping check")
        return 0

    all_violations: dict[Path, list[tuple[int, str]]] = {}
    for py_file in PACKAGE_DIR.rglob("*.py"):
        if py_file in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            all_violations[py_file] = violations

    if not all_violations:
        print(f"No datetime.now() violations found in {PACKAGE_DIR}/")
        return 0

    print("Direct datetime.now() calls detected:")
    print()
    for file_path, violations in sorted(all_violations.items()):
        print(f"  {file_path}:")
        for line_num, line_content in violations:
            print(f"    Line {line_num}: {line_content}")
        print()

    print("How to fix:")
    print("  1. Inject TimeAuthorityProtocol in your service constructor")
    print("  2. Use self._time.now() instead of datetime.now()")
    return 1


if __name__ == "__main__":
    sys.exit(main())
