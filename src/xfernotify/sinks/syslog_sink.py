from __future__ import annotations

import syslog

from ..exceptions import SinkConfigError
from ..config import SyslogSinkConfig
from ..records import TransferRecord


def priority(facility: str, level: str) -> int:
    """Combine facility and level names into a syslog priority value."""
    try:
        fac = getattr(syslog, "LOG_" + facility.upper())
        lvl = getattr(syslog, "LOG_" + level.upper())
    except AttributeError as exc:
        raise SinkConfigError(f"unsupported syslog facility/level {facility}.{level}") from exc
    return fac | lvl


class SyslogSink:
    """Emit the verbatim log line through the local syslog transport."""

    name = "syslog"

    def __init__(self, ident: str = "xfernotify") -> None:
        self.ident = ident
        self._opened = False

    def apply(self, config: SyslogSinkConfig, record: TransferRecord) -> bool:
        prio = priority(config.facility, config.level)
        if not self._opened:
            syslog.openlog(self.ident, syslog.LOG_PID)
            self._opened = True
        syslog.syslog(prio, record.raw_line)
        return True
