"""Typed transfer records produced by the xferlog parser."""
from __future__ import annotations

import enum
import posixpath
from dataclasses import asdict, dataclass
from typing import Any, Dict


class TransferType(str, enum.Enum):
    ASCII = "ascii"
    BINARY = "binary"


class Direction(str, enum.Enum):
    INCOMING = "incoming"  # upload
    OUTGOING = "outgoing"  # download


class CompletionStatus(str, enum.Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    ABORTED = "aborted"
    # The trailing status column is optional in xferlog; absence is not
    # treated as either complete or incomplete.
    UNSPECIFIED = "unspecified"


class Service(str, enum.Enum):
    FTP = "ftp"
    FTPS = "ftps"


@dataclass(frozen=True)
class TransferRecord:
    raw_line: str
    timestamp: str
    duration_seconds: int
    client: str
    size_bytes: int
    file_path: str
    transfer_type: TransferType
    special_action: str
    direction: Direction
    access_mode: str
    user: str
    service: Service
    auth_method: str
    auth_user_id: str
    completion_status: CompletionStatus

    @property
    def file_name(self) -> str:
        return posixpath.basename(self.file_path)

    @property
    def is_upload(self) -> bool:
        return self.direction is Direction.INCOMING

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, enum.Enum):
                data[key] = value.value
        return data


@dataclass(frozen=True)
class ParseFailure:
    raw_line: str
    reason: str


__all__ = [
    "TransferType",
    "Direction",
    "CompletionStatus",
    "Service",
    "TransferRecord",
    "ParseFailure",
]
