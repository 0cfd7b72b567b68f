from __future__ import annotations

from ..config import FileSinkConfig
from ..records import TransferRecord


class FileSink:
    """Append the verbatim log line to a file."""

    name = "file"

    def apply(self, config: FileSinkConfig, record: TransferRecord) -> bool:
        # Opened per record so external rotation (logrotate) is picked up.
        with open(config.path, "a", encoding="utf-8") as fh:
            fh.write(record.raw_line + "\n")
        return True
