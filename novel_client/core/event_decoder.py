"""
事件解碼器 - 將單行 `data:` 記錄解析為串流事件
損壞的行只會被丟棄，不會中斷整個會話
"""

import json
import logging
from typing import Iterable, List, Optional

from ..models.events import StreamEvent, parse_stream_event

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"


class EventDecoder:
    """SSE風格的 data 行解碼器"""

    def __init__(self):
        self.decoded_count = 0
        self.dropped_count = 0

    @staticmethod
    def extract_payload(line: str) -> Optional[str]:
        """取出 data: 之後的內容，非data行回傳None"""
        if not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX):]
        if payload.startswith(" "):
            payload = payload[1:]
        payload = payload.strip()
        return payload or None

    def decode_line(self, line: str) -> Optional[StreamEvent]:
        """解碼單行，無法解析時回傳None"""
        payload = self.extract_payload(line)
        if payload is None:
            return None

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            self.dropped_count += 1
            logger.warning(f"丟棄無法解析的事件行: {e} ({payload[:80]!r})")
            return None

        if not isinstance(data, dict):
            self.dropped_count += 1
            logger.warning(f"丟棄非物件的事件內容: {payload[:80]!r}")
            return None

        self.decoded_count += 1
        event = parse_stream_event(data)
        logger.debug(f"解碼事件: {event.type.value}")
        return event

    def decode_lines(self, lines: Iterable[str]) -> List[StreamEvent]:
        events = []
        for line in lines:
            event = self.decode_line(line)
            if event is not None:
                events.append(event)
        return events
