"""Unit tests for FileKeyValueStore."""

import json
from pathlib import Path

import pytest

from lobbysync.application.services.device_identity_service import (
    DeviceIdentityService,
)
from lobbysync.infrastructure.adapters.local import FileKeyValueStore


class TestFileKeyValueStore:
    """Tests for the JSON file store."""

    @pytest.mark.asyncio
    async def test_missing_file_reads_as_empty(self, tmp_path: Path) -> None:
        store = FileKeyValueStore(tmp_path / "state.json")

        assert await store.get("anything") is None

    @pytest.mark.asyncio
    async def test_values_survive_a_new_instance(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "state.json"
        await FileKeyValueStore(path).set("a", "1")
        await FileKeyValueStore(path).set("b", "2")

        reopened = FileKeyValueStore(path)

        assert await reopened.get("a") == "1"
        assert await reopened.get("b") == "2"
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}
        assert not path.with_name("state.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_as_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        store = FileKeyValueStore(path)

        assert await store.get("a") is None
        await store.set("a", "1")
        assert await store.get("a") == "1"

    @pytest.mark.asyncio
    async def test_non_string_values_are_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"a": 5}), encoding="utf-8")

        assert await FileKeyValueStore(path).get("a") is None

    @pytest.mark.asyncio
    async def test_device_identity_persists_across_processes(
        self, tmp_path: Path
    ) -> None:
        path = tmp_path / "state.json"

        before = DeviceIdentityService(FileKeyValueStore(path))
        after = DeviceIdentityService(FileKeyValueStore(path))

        first = await before.get_participant_id()
        second = await after.get_participant_id()

        assert first == second
