from __future__ import annotations

from typing import Optional

import requests

from ..exceptions import SinkConfigError
from ..filters import decide
from ..config import PushSinkConfig
from ..logutil import get_logger
from ..records import TransferRecord
from ..templates import render

logger = get_logger(__name__)


class PushSink:
    """Send a rendered note to a Pushbullet-compatible push endpoint.

    Gated by the filter chain; a filtered record is not an error."""

    name = "push"

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session or requests.Session()

    def payload(self, config: PushSinkConfig, record: TransferRecord) -> dict:
        return {
            "title": render(config.title, record),
            "body": render(config.body, record),
            "type": "note",
        }

    def apply(self, config: PushSinkConfig, record: TransferRecord) -> bool:
        if not config.token:
            raise SinkConfigError("missing access token")
        decision = decide(config, record)
        if not decision:
            logger.debug("Not notifying for %s: %s", record.file_path, decision.reason)
            return False
        headers = {"Access-Token": config.token, "Content-Type": "application/json"}
        resp = self._session.post(
            config.url,
            json=self.payload(config, record),
            headers=headers,
            timeout=config.timeout,
        )
        resp.raise_for_status()
        logger.info("Push sent for %s (%s)", record.file_path, resp.status_code)
        return True
