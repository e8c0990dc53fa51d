"""Unit tests for the datetime.now() pre-commit check."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "scripts"))

import check_no_datetime_now
from check_no_datetime_now import check_file

REPO_ROOT = Path(__file__).parent.parent.parent.parent


class TestCheckFile:
    """Tests for check_file()."""

    def test_detects_now_and_utcnow(self, tmp_path: Path) -> None:
        module = tmp_path / "module.py"
        module.write_text(
            "from datetime import datetime\n"
            "a = datetime.now()\n"
            "b = datetime.utcnow()\n"
        )

        assert [line for line, _ in check_file(module)] == [2, 3]

    def test_ignores_comments_and_injected_clock(self, tmp_path: Path) -> None:
        module = tmp_path / "module.py"
        module.write_text(
            "# datetime.now() is forbidden here\n"
            "now = self._time.now()\n"
        )

        assert check_file(module) == []


class TestMain:
    """Tests for main() against the real package."""

    def test_package_only_reads_clock_through_adapter(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(REPO_ROOT)

        assert check_no_datetime_now.main() == 0
