"""
任務狀態輪詢器

獨立於串流會話的背景輪詢，定期讀取伺服器上的任務狀態，
用於串流中斷或沒有串流時保持UI狀態一致。輪詢失敗只記錄日誌，不會向外拋出。
"""

import logging
import threading
from typing import Any, Callable, Optional

from ..models import DEFAULT_TASK_POLL_INTERVAL

logger = logging.getLogger(__name__)


class TaskPoller:
    """背景任務狀態輪詢器"""

    def __init__(self, fetch: Callable[[], Any], on_update: Callable[[Any], None] = None,
                 interval: float = DEFAULT_TASK_POLL_INTERVAL, name: str = "task-poller"):
        if interval <= 0:
            raise ValueError("輪詢間隔必須大於0")
        self.fetch = fetch
        self.on_update = on_update or (lambda result: None)
        self.interval = interval
        self.name = name

        self.last_result: Any = None
        self.last_error: Optional[Exception] = None
        self.poll_count = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @classmethod
    def for_project(cls, service, project_ref: str, on_update: Callable = None,
                    interval: float = None) -> "TaskPoller":
        """輪詢單一專案的進行中任務"""
        return cls(
            lambda: service.fetch_project_active_task(project_ref),
            on_update,
            interval if interval is not None else service.config.task_poll_interval,
            name=f"task-poller-{project_ref}",
        )

    @classmethod
    def for_active_tasks(cls, service, on_update: Callable = None,
                         interval: float = None) -> "TaskPoller":
        """輪詢使用者所有進行中的任務"""
        return cls(
            service.fetch_active_tasks,
            on_update,
            interval if interval is not None else service.config.task_poll_interval,
            name="active-tasks-poller",
        )

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """開始輪詢，會立即執行第一次"""
        with self._lock:
            if self.running:
                return
            # 每個背景執行緒擁有自己的停止事件
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._run, args=(stop_event,), name=self.name, daemon=True
            )
            self._thread.start()
        logger.info(f"{self.name} 已啟動，間隔 {self.interval} 秒")

    def stop(self, timeout: float = None) -> None:
        """停止輪詢並等待背景執行緒結束"""
        with self._lock:
            thread, self._thread = self._thread, None
            self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"{self.name} 背景執行緒未在 {timeout} 秒內結束，將在目前請求完成後退出")
        logger.info(f"{self.name} 已停止")

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.start()
        else:
            self.stop()

    def poll_now(self) -> bool:
        """立即輪詢一次，成功時回傳True"""
        return self._poll_once()

    def _poll_once(self, stop_event: threading.Event = None) -> bool:
        try:
            result = self.fetch()
        except Exception as e:
            self.last_error = e
            logger.warning(f"{self.name} 輪詢失敗: {str(e)}")
            return False

        self.last_result = result
        self.last_error = None
        self.poll_count += 1

        if stop_event is not None and stop_event.is_set():
            return True
        try:
            self.on_update(result)
        except Exception as e:
            logger.warning(f"{self.name} 更新回調失敗: {str(e)}")
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self._poll_once(stop_event)
            if stop_event.wait(self.interval):
                break

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
