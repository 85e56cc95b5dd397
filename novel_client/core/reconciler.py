"""
串流結果協調器

把有序的事件序列折疊為唯一的最終結果，同時把每個事件轉交給進度回調。
狀態機：IDLE → STREAMING → {DONE, ERRORED}

- heartbeat 不改變任何累積狀態
- 第一個終止事件（done / error）決定結果，之後的事件只轉交回調
- done 事件中明確給出的資料會取代（而非合併）逐步累積的資料
"""

import logging
from typing import Any, Callable, List, Optional

from ..models.enums import GenerationKind, SessionState, StreamEventType
from ..models.events import StreamEvent
from ..models.data_models import ChapterBatchResult, GeneratedChapter
from ..models.exceptions import GenerationFailedException, NoTerminalEventException

logger = logging.getLogger(__name__)

EventCallback = Callable[[StreamEvent], None]


class StreamReconciler:
    """協調器基類"""

    kind: GenerationKind = None
    default_error = "Generation failed"
    no_result_error = "No result received"

    def __init__(self, on_event: EventCallback = None):
        self.on_event = on_event or (lambda event: None)
        self.state = SessionState.IDLE
        self.error_message: Optional[str] = None
        self.last_message: Optional[str] = None
        self._result: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.DONE, SessionState.ERRORED)

    def handle(self, event: StreamEvent) -> None:
        """處理一個事件並轉交給回調"""
        if self.state is SessionState.IDLE:
            self.state = SessionState.STREAMING

        if self.is_terminal:
            logger.warning(f"終止事件之後收到 {event.type.value} 事件，已忽略")
        elif event.type is StreamEventType.DONE:
            self._on_done(event)
        elif event.type is StreamEventType.ERROR:
            self._fail(event.error or self.default_error)
        elif event.type is not StreamEventType.HEARTBEAT:
            if event.type is StreamEventType.PROGRESS and event.message:
                self.last_message = event.message
            self._on_progress(event)

        self.on_event(event)

    def finish(self) -> Any:
        """串流關閉後取得最終結果"""
        if self.state is SessionState.DONE:
            return self._result
        if self.state is SessionState.ERRORED:
            raise GenerationFailedException(self.error_message)

        self._fail(self.no_result_error)
        raise NoTerminalEventException(self.no_result_error)

    def _on_progress(self, event: StreamEvent) -> None:
        pass

    def _on_done(self, event: StreamEvent) -> None:
        raise NotImplementedError

    def _succeed(self, result: Any) -> None:
        self.state = SessionState.DONE
        self._result = result

    def _fail(self, message: str) -> None:
        logger.info(f"串流以錯誤結束: {message}")
        self.state = SessionState.ERRORED
        self.error_message = message


class OutlineReconciler(StreamReconciler):
    """大綱生成協調器"""

    kind = GenerationKind.OUTLINE
    default_error = "Outline generation failed"
    no_result_error = "No outline received"

    def __init__(self, on_event: EventCallback = None):
        super().__init__(on_event)
        self.status_text = ""

    def _on_progress(self, event):
        if event.type is StreamEventType.VOLUME_COMPLETE:
            index = event.volume_index
            # volumeIndex 從0開始
            shown = index + 1 if index is not None else "?"
            total = event.total_volumes if event.total_volumes is not None else "?"
            self.status_text = f"{shown}/{total} {event.volume_title or ''}".rstrip()

    def _on_done(self, event):
        if not event.success:
            self._fail(event.error or self.default_error)
        elif event.outline is None:
            self._fail(self.no_result_error)
        else:
            self._succeed(event.outline)


class ChapterBatchReconciler(StreamReconciler):
    """批次章節生成協調器"""

    kind = GenerationKind.CHAPTERS
    default_error = "Generation failed"
    no_result_error = "No result received"

    def __init__(self, on_event: EventCallback = None):
        super().__init__(on_event)
        self.generated: List[GeneratedChapter] = []
        self.chapter_errors: List[int] = []

    def _on_progress(self, event):
        if event.type is StreamEventType.CHAPTER_COMPLETE and event.chapter_index:
            self.generated.append(GeneratedChapter(
                chapter=event.chapter_index,
                title=event.title or f"Chapter {event.chapter_index}",
            ))
        elif event.type is StreamEventType.CHAPTER_ERROR and event.chapter_index:
            self.chapter_errors.append(event.chapter_index)

    def _on_done(self, event):
        if event.generated is not None:
            self.generated = list(event.generated)
        failed_chapters = list(event.failed_chapters or [])

        if not event.success:
            self._fail(event.error or self.default_error)
        else:
            self._succeed(ChapterBatchResult(
                generated=list(self.generated),
                failed_chapters=failed_chapters,
            ))


RECONCILERS = {
    GenerationKind.OUTLINE: OutlineReconciler,
    GenerationKind.CHAPTERS: ChapterBatchReconciler,
}


def create_reconciler(kind: GenerationKind, on_event: EventCallback = None) -> StreamReconciler:
    return RECONCILERS[kind](on_event)
