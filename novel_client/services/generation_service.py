"""
生成服務層 - 對外提供大綱與章節的串流生成操作

每個操作都是兩個輸出：
- on_event 回調：每收到一個事件就呼叫一次，供UI即時顯示
- 回傳值：會話結束時唯一的最終結果（失敗時拋出例外）

依賴項：
- APIConnector: 開啟HTTP請求
- StreamTransport: 讀取串流回應
- StreamSession: 每次呼叫獨立的解碼與協調狀態
"""

import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from ..core import StreamSession
from ..models import (
    GenerationKind, NovelOutline, ChapterBatchResult, GenerationTask,
    StreamEvent, StreamAbortedException
)
from ..utils.decorators import log_execution
from .api_connector import APIConnector
from .transport import StreamTransport

logger = logging.getLogger(__name__)

EventCallback = Callable[[StreamEvent], None]


def _project_path(project_ref: str, suffix: str) -> str:
    return f"/projects/{quote(str(project_ref), safe='')}{suffix}"


class GenerationService:
    """
    串流生成服務

    同一個任務同一時間只應該有一個串流會話；需要從其他執行緒中止時，
    先以 new_session() 建立會話再傳入操作，之後呼叫 session.abort()。
    """

    def __init__(self, api_connector: APIConnector, transport: StreamTransport = None,
                 debug_callback: Callable = None):
        self.api_connector = api_connector
        self.debug_callback = debug_callback or (lambda x: None)
        self.transport = transport or StreamTransport(
            chunk_size=api_connector.config.chunk_size,
            debug_callback=self.debug_callback
        )

    @property
    def config(self):
        return self.api_connector.config

    def new_session(self, kind: GenerationKind, on_event: EventCallback = None) -> StreamSession:
        """建立新的串流會話"""
        def handle_event(event: StreamEvent):
            if event.message:
                self.debug_callback(f"📨 {event.type.value}: {event.message}")
            if on_event:
                on_event(event)

        return StreamSession.for_kind(kind, handle_event)

    @log_execution
    def generate_outline(self, project_ref: str, target_chapters: int = 400,
                         target_word_count: int = 100, min_chapter_words: int = None,
                         custom_prompt: str = None, on_event: EventCallback = None,
                         session: StreamSession = None) -> NovelOutline:
        """生成整體大綱（目標字數以萬字為單位）"""
        payload = {
            "targetChapters": target_chapters,
            "targetWordCount": target_word_count,
        }
        if min_chapter_words is not None:
            payload["minChapterWords"] = min_chapter_words
        if custom_prompt:
            payload["customPrompt"] = custom_prompt

        return self._run_stream(
            GenerationKind.OUTLINE, _project_path(project_ref, "/outline"),
            payload, on_event, session
        )

    @log_execution
    def add_outline_volumes(self, project_ref: str, new_volume_count: int = 1,
                            chapters_per_volume: int = 80, min_chapter_words: int = None,
                            on_event: EventCallback = None,
                            session: StreamSession = None) -> NovelOutline:
        """在現有大綱後追加新卷"""
        if not 1 <= new_volume_count <= 20:
            raise ValueError("new_volume_count 必須介於 1 到 20")
        if not 1 <= chapters_per_volume <= 200:
            raise ValueError("chapters_per_volume 必須介於 1 到 200")

        payload = {
            "newVolumeCount": new_volume_count,
            "chaptersPerVolume": chapters_per_volume,
        }
        if min_chapter_words is not None:
            payload["minChapterWords"] = min_chapter_words

        return self._run_stream(
            GenerationKind.OUTLINE, _project_path(project_ref, "/outline/add-volumes"),
            payload, on_event, session
        )

    @log_execution
    def refine_outline(self, project_ref: str, on_event: EventCallback = None,
                       session: StreamSession = None) -> NovelOutline:
        """補齊大綱中缺少章節細節的分卷"""
        return self._run_stream(
            GenerationKind.OUTLINE, _project_path(project_ref, "/outline/refine"),
            {}, on_event, session
        )

    @log_execution
    def generate_chapters(self, project_ref: str, chapters_to_generate: int = 1,
                          min_chapter_words: int = None, index: int = None,
                          regenerate: bool = False, on_event: EventCallback = None,
                          session: StreamSession = None) -> ChapterBatchResult:
        """批次生成章節"""
        payload = {"chaptersToGenerate": chapters_to_generate}
        if min_chapter_words is not None:
            payload["minChapterWords"] = min_chapter_words
        if index is not None:
            payload["index"] = index
        if regenerate:
            payload["regenerate"] = True

        return self._run_stream(
            GenerationKind.CHAPTERS, _project_path(project_ref, "/generate-stream"),
            payload, on_event, session
        )

    def fetch_project_active_task(self, project_ref: str) -> Optional[GenerationTask]:
        """讀取專案目前的生成任務"""
        data = self.api_connector.get_json(_project_path(project_ref, "/active-task"))
        task = data.get("task") if isinstance(data, dict) else None
        return GenerationTask.from_dict(task) if isinstance(task, dict) else None

    def fetch_active_tasks(self) -> List[GenerationTask]:
        """讀取使用者所有進行中的任務"""
        data = self.api_connector.get_json("/active-tasks")
        tasks = data.get("tasks") if isinstance(data, dict) else None
        return [GenerationTask.from_dict(t) for t in tasks or [] if isinstance(t, dict)]

    @log_execution
    def cancel_active_tasks(self, project_ref: str) -> None:
        """取消專案所有進行中的生成任務"""
        self.api_connector.post_json(
            _project_path(project_ref, "/active-tasks/cancel"),
            default_error="Failed to cancel active tasks"
        )

    @log_execution
    def pause_task(self, project_ref: str, task_id: int) -> None:
        """暫停執行中的任務"""
        self.api_connector.post_json(
            _project_path(project_ref, f"/tasks/{int(task_id)}/pause"),
            default_error="Failed to pause task"
        )

    @log_execution
    def cancel_task(self, task_id: int) -> None:
        self.api_connector.post_json(
            f"/tasks/{int(task_id)}/cancel",
            default_error="Failed to cancel task"
        )

    def _run_stream(self, kind: GenerationKind, path: str, payload: Dict,
                    on_event: Optional[EventCallback], session: Optional[StreamSession]):
        if session is None:
            session = self.new_session(kind, on_event)
        elif session.kind is not kind:
            raise ValueError(f"會話類型 {session.kind.value} 與操作 {kind.value} 不符")

        if session.aborted:
            raise StreamAbortedException("串流已被中止")

        response = self.api_connector.open_stream(path, payload)
        return self.transport.consume(response, session)
