import pytest

from xfernotify.parsers import parse_line

SAMPLE_LINE = "Sun Jun 17 14:33:58 2018 0 hostname.domain.com 5 /srv/ftp/foo a _ o r myuser ftp 0 * c"


def make_line(size=5, duration=0, path="/srv/ftp/foo", direction="o", status="c", user="myuser"):
    line = f"Sun Jun 17 14:33:58 2018 {duration} hostname.domain.com {size} {path} b _ {direction} r {user} ftp 0 *"
    return f"{line} {status}" if status else line


def make_record(**kwargs):
    record = parse_line(make_line(**kwargs))
    assert not hasattr(record, "reason"), record
    return record


@pytest.fixture
def sample_record():
    return parse_line(SAMPLE_LINE)
