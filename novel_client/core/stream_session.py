"""
串流會話

每次生成呼叫建立一個 StreamSession，擁有自己的緩衝區、解碼器與協調器，
會話結束後即丟棄，不同會話之間不共享任何狀態。
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Union

from ..models.enums import GenerationKind
from ..models.events import StreamEvent, parse_stream_event
from ..models.exceptions import GenerationFailedException, StreamAbortedException
from .chunk_buffer import ChunkBuffer
from .event_decoder import EventDecoder
from .reconciler import StreamReconciler, EventCallback, create_reconciler

logger = logging.getLogger(__name__)


class StreamSession:
    """單一串流回應的完整生命週期"""

    def __init__(self, reconciler: StreamReconciler, encoding: str = "utf-8"):
        self.reconciler = reconciler
        self.buffer = ChunkBuffer(encoding)
        self.decoder = EventDecoder()
        self.event_count = 0
        self._abort_event = threading.Event()
        self._abort_hooks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @classmethod
    def for_kind(cls, kind: GenerationKind, on_event: EventCallback = None) -> "StreamSession":
        return cls(create_reconciler(kind, on_event))

    @property
    def kind(self) -> GenerationKind:
        return self.reconciler.kind

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def abort(self) -> None:
        """中止會話，可由其他執行緒呼叫"""
        with self._lock:
            if self._abort_event.is_set():
                return
            self._abort_event.set()
            hooks, self._abort_hooks = self._abort_hooks, []
        logger.info("串流會話已被中止")
        for hook in hooks:
            try:
                hook()
            except Exception as e:
                logger.debug(f"中止時關閉資源失敗: {e}")

    def add_abort_hook(self, hook: Callable[[], None]) -> None:
        """註冊中止時要執行的動作（例如關閉連線）"""
        with self._lock:
            if not self._abort_event.is_set():
                self._abort_hooks.append(hook)
                return
        hook()

    def feed(self, chunk: Union[bytes, str]) -> None:
        """處理傳輸層送來的一個分塊"""
        for line in self.buffer.feed(chunk):
            self._process_line(line)

    def flush(self) -> None:
        for line in self.buffer.flush():
            self._process_line(line)

    def feed_text(self, text: Union[bytes, str]) -> int:
        """一次處理完整的回應內容，回傳解析出的事件數"""
        before = self.event_count
        self.feed(text)
        self.flush()
        return self.event_count - before

    def apply_envelope(self, data: Dict[str, Any]) -> None:
        """
        把整個回應當作單一JSON物件處理

        有 type 字段時視為一般事件；success 為 False 時視為失敗；
        其餘情況視為隱含的 done 事件。
        """
        if data.get("type"):
            self._dispatch(parse_stream_event(data))
            return
        if data.get("success") is False:
            raise GenerationFailedException(data.get("error") or self.reconciler.default_error)
        self._dispatch(parse_stream_event({**data, "type": "done", "success": True}))

    def finish(self) -> Any:
        """串流關閉後取得最終結果"""
        if self.aborted:
            raise StreamAbortedException("串流已被中止")
        self.flush()
        return self.reconciler.finish()

    def _process_line(self, line: str) -> None:
        event = self.decoder.decode_line(line)
        if event is not None:
            self._dispatch(event)

    def _dispatch(self, event: StreamEvent) -> None:
        self.event_count += 1
        self.reconciler.handle(event)
