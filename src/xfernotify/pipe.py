import os
import stat
import time
from typing import Callable, Iterator, Optional

from .exceptions import PipeError
from .logutil import get_logger

logger = get_logger(__name__)


def ensure_fifo(path: str, create: bool = True, mode: int = 0o622) -> bool:
    """Make sure ``path`` is something we can read lines from.

    Returns True for a FIFO, False for a regular file (accepted for replaying
    a saved xferlog). Creates the FIFO when it is missing and ``create`` is set.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        if not create:
            raise PipeError(f"pipe {path} does not exist")
        try:
            os.mkfifo(path, mode)
        except OSError as exc:
            raise PipeError(f"cannot create pipe {path}: {exc}") from exc
        logger.info("Created pipe %s", path)
        return True
    except OSError as exc:
        raise PipeError(f"cannot stat pipe {path}: {exc}") from exc
    if stat.S_ISFIFO(st.st_mode):
        return True
    if stat.S_ISREG(st.st_mode):
        return False
    raise PipeError(f"{path} is neither a named pipe nor a regular file")


def read_pipe(
    path: str,
    create: bool = True,
    follow: bool = False,
    sleep_s: float = 0.25,
    stop_event: Optional[object] = None,
    on_reopen: Optional[Callable[[], None]] = None,
) -> Iterator[str]:
    """Yield newline-stripped lines from a named pipe, forever.

    Behavior:
    - Opening a FIFO blocks until a writer (the FTP server) connects.
    - When the last writer closes, the pipe is reopened and we block again;
      writer disconnects never end the stream.
    - A regular file is read once from the start; with ``follow`` it is
      polled for appended lines like ``tail -f``.
    - Undecodable bytes are replaced rather than raising.
    """
    def _stopped() -> bool:
        return stop_event is not None and getattr(stop_event, "is_set", lambda: False)()

    is_fifo = ensure_fifo(path, create=create)
    while not _stopped():
        try:
            handle = open(path, "r", encoding="utf-8", errors="replace")
        except OSError as exc:
            raise PipeError(f"cannot open pipe {path}: {exc}") from exc
        with handle:
            while True:
                line = handle.readline()
                if line:
                    yield line.rstrip("\r\n")
                    if _stopped():
                        return
                    continue
                if is_fifo:
                    break  # writer closed
                if not follow or _stopped():
                    return
                time.sleep(sleep_s)
        logger.debug("Writer closed %s; reopening", path)
        if on_reopen is not None:
            on_reopen()


__all__ = ["ensure_fifo", "read_pipe"]
