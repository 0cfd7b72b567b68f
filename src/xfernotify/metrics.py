"""Runtime counters for the pipe loop.

Written by the single processing thread and read by the optional status
service, so every access goes through one lock.
"""
from __future__ import annotations

import threading
import time
from collections import Counter
from typing import Any, Dict


class Counters:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.started_at = time.time()
        self.lines_read = 0
        self.records_parsed = 0
        self.lines_invalid = 0
        self.pipe_reopens = 0
        self.deliveries: Counter[str] = Counter()
        self.skips: Counter[str] = Counter()
        self.failures: Counter[str] = Counter()

    def line(self, parsed: bool) -> None:
        with self._lock:
            self.lines_read += 1
            if parsed:
                self.records_parsed += 1
            else:
                self.lines_invalid += 1

    def reopened(self) -> None:
        with self._lock:
            self.pipe_reopens += 1

    def outcome(self, sink_type: str, outcome: str) -> None:
        bucket = {"delivered": self.deliveries, "skipped": self.skips, "failed": self.failures}[outcome]
        with self._lock:
            bucket[sink_type] += 1

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "uptime_seconds": round(time.time() - self.started_at, 3),
                "lines_read": self.lines_read,
                "records_parsed": self.records_parsed,
                "lines_invalid": self.lines_invalid,
                "pipe_reopens": self.pipe_reopens,
                "deliveries": dict(self.deliveries),
                "skips": dict(self.skips),
                "failures": dict(self.failures),
            }

    def summary(self) -> str:
        snap = self.snapshot()
        return (
            f"lines={snap['lines_read']} records={snap['records_parsed']} invalid={snap['lines_invalid']} "
            f"delivered={sum(snap['deliveries'].values())} skipped={sum(snap['skips'].values())} "
            f"failed={sum(snap['failures'].values())}"
        )

__all__ = ["Counters"]
