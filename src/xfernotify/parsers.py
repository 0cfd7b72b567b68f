import re
from typing import Union

from .records import (
    CompletionStatus,
    Direction,
    ParseFailure,
    Service,
    TransferRecord,
    TransferType,
)

# xferlog(5): ctime-style timestamp followed by 13 space separated columns and
# an optional completion status. The day of month may be space padded.
_XFERLOG = re.compile(
    r"^(?P<timestamp>[a-z]{3} [a-z]{3} {1,2}\d{1,2} \d{2}:\d{2}:\d{2} \d{4})"
    r" (?P<duration>\d+)"
    r" (?P<client>\S+)"
    r" (?P<size>\d+)"
    r" (?P<path>\S+)"
    r" (?P<type>[ab])"
    r" (?P<flag>\S+)"
    r" (?P<direction>[io])"
    r" (?P<mode>\S+)"
    r" (?P<user>\S+)"
    r" (?P<service>ftps?)"
    r" (?P<auth_method>\S+)"
    r" (?P<auth_userid>\S+)"
    r"(?: (?P<status>[ci]))?$",
    re.IGNORECASE,
)

_TYPES = {"a": TransferType.ASCII, "b": TransferType.BINARY}
_DIRECTIONS = {"i": Direction.INCOMING, "o": Direction.OUTGOING}
_STATUSES = {"c": CompletionStatus.COMPLETE, "i": CompletionStatus.INCOMPLETE}

ParseResult = Union[TransferRecord, ParseFailure]


def parse_line(line: str) -> ParseResult:
    """
    Parse one xferlog line into a TransferRecord.

    Returns a ParseFailure carrying the raw line when the line does not
    match the grammar; never raises for bad input.
    """
    raw = line.rstrip("\r\n")
    match = _XFERLOG.match(raw)
    if match is None:
        return ParseFailure(raw_line=raw, reason="line does not match xferlog grammar")

    status = match.group("status")
    return TransferRecord(
        raw_line=raw,
        timestamp=match.group("timestamp"),
        duration_seconds=int(match.group("duration")),
        client=match.group("client"),
        size_bytes=int(match.group("size")),
        file_path=match.group("path"),
        transfer_type=_TYPES[match.group("type").lower()],
        special_action=match.group("flag"),
        direction=_DIRECTIONS[match.group("direction").lower()],
        access_mode=match.group("mode"),
        user=match.group("user"),
        service=Service(match.group("service").lower()),
        auth_method=match.group("auth_method"),
        auth_user_id=match.group("auth_userid"),
        completion_status=_STATUSES[status.lower()] if status else CompletionStatus.UNSPECIFIED,
    )


__all__ = ["parse_line", "ParseResult"]
