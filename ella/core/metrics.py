"""Lightweight in-memory metrics collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict


@dataclass
class MetricSnapshot:
    total_turns: int
    steps: Dict[str, int]
    intents: Dict[str, int]
    bookings_confirmed: int
    handoff_failures: int


class MetricsCollector:
    """Thread-safe counter storage for basic service metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_turns = 0
        self._steps: Counter[str] = Counter()
        self._intents: Counter[str] = Counter()
        self._bookings_confirmed = 0
        self._handoff_failures = 0

    def record_turn(self, step: str, intent: str) -> None:
        with self._lock:
            self._total_turns += 1
            self._steps[step] += 1
            self._intents[intent] += 1

    def record_booking(self, success: bool) -> None:
        with self._lock:
            self._bookings_confirmed += 1
            if not success:
                self._handoff_failures += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_turns=self._total_turns,
                steps=dict(self._steps),
                intents=dict(self._intents),
                bookings_confirmed=self._bookings_confirmed,
                handoff_failures=self._handoff_failures,
            )
