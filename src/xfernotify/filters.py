"""Filter chain deciding whether a push notification is sent for a transfer."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .config import PushSinkConfig
from .records import CompletionStatus, Direction, TransferRecord
from .templates import MIB


@dataclass(frozen=True)
class FilterDecision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def skip(cls, reason: str) -> "FilterDecision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = FilterDecision(allowed=True)


def decide(config: PushSinkConfig, record: TransferRecord) -> FilterDecision:
    """Evaluate the rules in order; the first failing rule gives the reason."""
    if record.direction is Direction.INCOMING and not config.alert_upload:
        return FilterDecision.skip("upload alerts disabled")
    if record.direction is Direction.OUTGOING and not config.alert_download:
        return FilterDecision.skip("download alerts disabled")
    if record.size_bytes / MIB < config.filesize_min_mb:
        return FilterDecision.skip("file too small")
    if re.search(config.filename_filter, record.file_path) is None:
        return FilterDecision.skip("filename does not match")
    if record.completion_status is CompletionStatus.INCOMPLETE and config.skip_incomplete:
        return FilterDecision.skip("incomplete transfer")
    return ALLOW


__all__ = ["FilterDecision", "ALLOW", "decide"]
