import os
import stat
import threading
import time

import pytest

from xfernotify.exceptions import PipeError
from xfernotify.pipe import ensure_fifo, read_pipe

pytestmark = pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes need POSIX")


def _wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_fifo_is_created_and_reopened_after_writer_closes(tmp_path):
    path = tmp_path / "xferlog.pipe"
    collected: list[str] = []
    reopens: list[int] = []
    stop = threading.Event()

    def consumer():
        for line in read_pipe(str(path), stop_event=stop, on_reopen=lambda: reopens.append(1)):
            collected.append(line)
            if len(collected) == 3:
                stop.set()

    t = threading.Thread(target=consumer, daemon=True)
    t.start()
    try:
        assert _wait_for(path.exists), "pipe was not created"
        assert stat.S_ISFIFO(os.stat(path).st_mode)

        with open(path, "w", encoding="utf-8") as w:
            w.write("one\ntwo\n")
        assert _wait_for(lambda: len(collected) == 2), collected
        assert _wait_for(lambda: reopens == [1]), "reader did not reopen after writer closed"

        # A new writer after the first one closed must be picked up.
        with open(path, "w", encoding="utf-8") as w:
            w.write("three\r\n")
        t.join(timeout=2.0)
        assert not t.is_alive()
        assert collected == ["one", "two", "three"]
        assert reopens == [1]
    finally:
        stop.set()


def test_regular_file_is_read_once(tmp_path):
    path = tmp_path / "saved.xferlog"
    path.write_text("first\nsecond\n\nthird", encoding="utf-8")
    assert list(read_pipe(str(path))) == ["first", "second", "", "third"]


def test_regular_file_follow_picks_up_appends(tmp_path):
    path = tmp_path / "growing.xferlog"
    path.write_text("a\n", encoding="utf-8")
    stop = threading.Event()
    collected: list[str] = []

    def consumer():
        for line in read_pipe(str(path), follow=True, sleep_s=0.01, stop_event=stop):
            collected.append(line)
            if line == "b":
                stop.set()

    t = threading.Thread(target=consumer, daemon=True)
    t.start()
    try:
        assert _wait_for(lambda: collected == ["a"])
        with path.open("a", encoding="utf-8") as h:
            h.write("b\n")
        t.join(timeout=2.0)
        assert collected == ["a", "b"]
    finally:
        stop.set()


def test_invalid_bytes_are_replaced(tmp_path):
    path = tmp_path / "latin1.xferlog"
    path.write_bytes(b"caf\xe9\n")
    (line,) = list(read_pipe(str(path)))
    assert line.startswith("caf") and "�" in line


def test_missing_pipe_without_create(tmp_path):
    with pytest.raises(PipeError, match="does not exist"):
        ensure_fifo(str(tmp_path / "absent.pipe"), create=False)


def test_pipe_cannot_be_created(tmp_path):
    with pytest.raises(PipeError, match="cannot create"):
        next(read_pipe(str(tmp_path / "no" / "dir" / "x.pipe")))


def test_directory_is_rejected(tmp_path):
    with pytest.raises(PipeError, match="neither"):
        ensure_fifo(str(tmp_path))
