"""Output sinks.

A sink turns a transfer record plus one instance configuration into an
external side effect. Sinks are stateless with respect to records; the same
sink object serves every configured instance of its type.
"""
from __future__ import annotations

from typing import Dict, Protocol

from ..config import SinkConfig
from ..records import TransferRecord
from .file import FileSink
from .push import PushSink
from .syslog_sink import SyslogSink


class Sink(Protocol):  # pragma: no cover - simple protocol
    name: str

    def apply(self, config: SinkConfig, record: TransferRecord) -> bool:
        """Act on ``record``; return False when the record was filtered out."""
        ...


def default_sinks() -> Dict[str, Sink]:
    """Built-in sink for each output type name."""
    return {
        FileSink.name: FileSink(),
        SyslogSink.name: SyslogSink(),
        PushSink.name: PushSink(),
    }


__all__ = ["Sink", "FileSink", "SyslogSink", "PushSink", "default_sinks"]
