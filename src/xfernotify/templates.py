"""Message templates for notification sinks.

Placeholders are ``%`` followed by one letter and are substituted in a single
left-to-right pass, so text produced by one substitution (a file name that
contains ``%u`` for example) is never expanded again.

    %u  user                    %d  timestamp
    %c  client host             %D  duration in seconds
    %F  full file path          %s  size in bytes
    %f  file name               %S  human readable size (binary units)
    %a  upload / download       %b  bandwidth in MB/s
    %A  uploaded / downloaded
"""
import re
from typing import Callable, Dict

from .records import TransferRecord

MIB = 1_048_576

_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB"]


def human_size(size_bytes: int) -> str:
    """Render a byte count with binary units, e.g. ``1.0 MiB``."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_UNITS[unit]}"


def bandwidth(record: TransferRecord) -> str:
    # duration + 1 keeps zero-second transfers from dividing by zero
    return f"{record.size_bytes / (MIB * (record.duration_seconds + 1)):.2f}"


def _action(record: TransferRecord) -> str:
    return "upload" if record.is_upload else "download"


_FIELDS: Dict[str, Callable[[TransferRecord], str]] = {
    "u": lambda r: r.user,
    "c": lambda r: r.client,
    "F": lambda r: r.file_path,
    "f": lambda r: r.file_name,
    "d": lambda r: r.timestamp,
    "D": lambda r: str(r.duration_seconds),
    "s": lambda r: str(r.size_bytes),
    "S": lambda r: human_size(r.size_bytes),
    "a": _action,
    "A": lambda r: _action(r) + "ed",
    "b": bandwidth,
}

_PLACEHOLDER = re.compile("%([" + "".join(_FIELDS) + "])")


def render(template: str, record: TransferRecord) -> str:
    """Return ``template`` with every known placeholder replaced from ``record``.

    Unknown ``%x`` sequences are left as they are."""
    return _PLACEHOLDER.sub(lambda m: _FIELDS[m.group(1)](record), template)


__all__ = ["render", "human_size", "bandwidth", "MIB"]
