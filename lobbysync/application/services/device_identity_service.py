"""Device identity service.

Each device keeps one participant id for its whole lifetime. The id is read
from the local key-value store once, generated and written once if missing,
and cached for the rest of the process. Reloading the client therefore
resumes the same roster row instead of creating a new participant.
"""

from __future__ import annotations

from uuid import uuid4

from lobbysync.application.ports.key_value_store import KeyValueStoreProtocol
from lobbysync.application.services.base import LoggingMixin

PARTICIPANT_ID_KEY = "lobby_participant_id"


class DeviceIdentityService(LoggingMixin):
    """Provides the stable per-device participant id.

    Attributes:
        _store: Local durable key-value store.
        _participant_id: Cached id after the first lookup.
    """

    def __init__(self, store: KeyValueStoreProtocol) -> None:
        """Initialize the service.

        Args:
            store: Local durable key-value store.
        """
        self._store = store
        self._participant_id: str | None = None
        self._init_logger()

    async def get_participant_id(self) -> str:
        """Return this device's participant id, creating it on first use.

        Returns:
            The participant id.
        """
        if self._participant_id is not None:
            return self._participant_id

        stored = await self._store.get(PARTICIPANT_ID_KEY)
        if stored:
            self._participant_id = stored
            return stored

        participant_id = str(uuid4())
        await self._store.set(PARTICIPANT_ID_KEY, participant_id)
        self._participant_id = participant_id
        self._log_operation(
            "get_participant_id", participant_id=participant_id
        ).info("device_participant_id_generated")
        return participant_id
