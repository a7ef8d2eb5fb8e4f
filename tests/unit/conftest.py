"""Pytest unit test fixtures."""

import pytest

from ella.booking import InMemoryBookingCreator
from ella.core.metrics import MetricsCollector
from ella.dialogue.machine import DialogueMachine
from ella.memory.store import SQLiteTranscriptStore, TranscriptStore


class FlakyStore(TranscriptStore):
    """Keeps messages in a list and refuses the appends numbered in ``failing``."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = 0
        self.stored = []

    def append(self, conversation_id, message):
        self.calls += 1
        if self.calls in self.failing:
            raise OSError("disk full")
        self.stored.append(message)

    def fetch(self, conversation_id, limit=None):
        return list(self.stored)

    def iter_conversations(self):
        return []


@pytest.fixture()
def transcript_store(tmp_path):
    db_path = tmp_path / "transcripts.db"
    return SQLiteTranscriptStore(db_path)


@pytest.fixture()
def flaky_store():
    return FlakyStore


@pytest.fixture()
def machine():
    return DialogueMachine(
        business_name="Sparkleville", specific_date_placeholder="December 10, 2025"
    )


@pytest.fixture()
def booking_creator():
    return InMemoryBookingCreator()


@pytest.fixture()
def metrics():
    return MetricsCollector()
