"""Fan a parsed transfer record out to every configured sink instance."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import requests

from .config import SINK_TYPES, Outputs
from .exceptions import SinkConfigError
from .logutil import get_logger
from .metrics import Counters
from .records import TransferRecord
from .sinks import Sink, default_sinks

logger = get_logger(__name__)


@dataclass
class DispatchReport:
    delivered: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        return self.delivered + self.skipped + self.failed


class Dispatcher:
    """Invoke each enabled sink instance, grouped by type, in config order.

    One failing instance never stops the others: configuration problems are
    logged as warnings, delivery errors as errors.
    """

    def __init__(
        self,
        outputs: Outputs,
        sinks: Optional[Mapping[str, Sink]] = None,
        counters: Optional[Counters] = None,
    ) -> None:
        self.outputs = outputs
        self.sinks = dict(sinks) if sinks is not None else default_sinks()
        self.counters = counters
        for sink_type in SINK_TYPES:
            if outputs.get(sink_type) and sink_type not in self.sinks:
                raise ValueError(f"no sink registered for output type {sink_type!r}")

    def enabled(self) -> list[str]:
        return [t for t in SINK_TYPES if self.outputs.get(t)]

    def dispatch(self, record: TransferRecord) -> DispatchReport:
        report = DispatchReport()
        for sink_type in SINK_TYPES:
            instances = self.outputs.get(sink_type) or ()
            if not instances:
                continue
            sink = self.sinks[sink_type]
            for index, instance in enumerate(instances):
                label = f"{sink_type}[{index}]"
                try:
                    acted = sink.apply(instance, record)
                except SinkConfigError as exc:
                    logger.warning("%s: configuration error, skipping: %s", label, exc)
                    outcome = "failed"
                except (OSError, requests.RequestException) as exc:
                    logger.error("%s: delivery failed for %s: %s", label, record.file_path, exc)
                    outcome = "failed"
                except Exception:  # noqa: BLE001 - one sink must not stop the others
                    logger.exception("%s: unexpected error for %s", label, record.file_path)
                    outcome = "failed"
                else:
                    outcome = "delivered" if acted else "skipped"

                if outcome == "delivered":
                    report.delivered += 1
                elif outcome == "skipped":
                    report.skipped += 1
                else:
                    report.failed += 1
                if self.counters is not None:
                    self.counters.outcome(sink_type, outcome)
        return report


__all__ = ["Dispatcher", "DispatchReport"]
