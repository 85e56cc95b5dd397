"""
串流傳輸層

支援增量讀取時逐塊餵給會話；執行環境無法增量讀取時，一次讀完整個回應，
以相同的切行與解碼邏輯處理，仍然沒有事件時再嘗試把整個回應當作單一JSON。
不論以何種方式離開，回應都會被關閉。
"""

import json
import logging
from typing import Any, Callable, Optional

import requests

from ..core import StreamSession
from ..models import APIException, JSONParseException

logger = logging.getLogger(__name__)


class StreamTransport:
    """驅動串流會話的讀取循環"""

    def __init__(self, chunk_size: Optional[int] = None, debug_callback: Callable = None):
        self.chunk_size = chunk_size
        self.debug_callback = debug_callback or (lambda x: None)

    @staticmethod
    def supports_incremental(response) -> bool:
        return getattr(response, "raw", None) is not None and hasattr(response, "iter_content")

    def consume(self, response, session: StreamSession) -> Any:
        """讀取整個回應並回傳會話的最終結果"""
        session.add_abort_hook(response.close)
        try:
            if self.supports_incremental(response):
                self._read_incremental(response, session)
            else:
                logger.info("回應不支援增量讀取，改為一次讀取整個內容")
                self._read_whole_body(response, session)
        except requests.exceptions.RequestException as e:
            if not session.aborted:
                logger.error(f"讀取串流失敗: {str(e)}")
                raise APIException(f"讀取串流失敗: {str(e)}") from e
        except Exception as e:
            # 中止時關閉連線會讓阻塞中的讀取以各種例外結束
            if not session.aborted:
                raise
            logger.debug(f"中止後的讀取例外: {e!r}")
        finally:
            response.close()

        self.debug_callback(f"📥 串流結束，共 {session.event_count} 個事件")
        return session.finish()

    def _read_incremental(self, response, session: StreamSession) -> None:
        for chunk in response.iter_content(chunk_size=self.chunk_size):
            if session.aborted:
                break
            if chunk:
                session.feed(chunk)

    def _read_whole_body(self, response, session: StreamSession) -> None:
        body = response.content or b""
        if not body.strip():
            raise JSONParseException("回應為空，無法解析生成結果")

        if session.feed_text(body) > 0:
            return

        try:
            data = json.loads(body)
        except ValueError as e:
            raise JSONParseException("無法解析串流回應") from e
        if not isinstance(data, dict):
            raise JSONParseException("無法解析串流回應")

        logger.warning("回應中沒有data行，將整個內容視為單一結果")
        session.apply_envelope(data)
