"""
小說生成客戶端的數據模型定義
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from .enums import TaskStatus

# 任務狀態輪詢間隔（秒）
DEFAULT_TASK_POLL_INTERVAL = 8.0
# 專案詳情頁使用較短的間隔
PROJECT_TASK_POLL_INTERVAL = 3.5


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_int_list(values) -> List[int]:
    if not isinstance(values, list):
        return []
    result = []
    for value in values:
        number = _as_int(value, None)
        if number is not None:
            result.append(number)
    return result


@dataclass
class AIOverride:
    """自訂AI供應商設定，以 x-custom-* 標頭送出"""
    provider: str = ""
    model: str = ""
    base_url: str = ""
    api_key: str = ""

    def to_headers(self) -> Dict[str, str]:
        headers = {}
        if self.provider:
            headers["x-custom-provider"] = self.provider
        if self.model:
            headers["x-custom-model"] = self.model
        if self.base_url:
            headers["x-custom-base-url"] = self.base_url
        if self.api_key:
            headers["x-custom-api-key"] = self.api_key
        return headers


@dataclass
class ClientConfig:
    """客戶端配置數據類"""
    api_base_url: str = "http://localhost:8787"
    token: str = ""
    timeout: int = 60
    # 串流兩個分塊之間允許的最長間隔，None 表示不限制
    read_timeout: Optional[float] = None
    max_retries: int = 2
    chunk_size: Optional[int] = None
    task_poll_interval: float = DEFAULT_TASK_POLL_INTERVAL
    ai: AIOverride = None

    def __post_init__(self):
        if self.ai is None:
            self.ai = AIOverride()

    @classmethod
    def from_env(cls, environ: Dict[str, str] = None) -> "ClientConfig":
        """從環境變數建立配置"""
        environ = os.environ if environ is None else environ
        config = cls()
        config.api_base_url = environ.get("NOVEL_API_BASE_URL", config.api_base_url)
        config.token = environ.get("NOVEL_API_TOKEN", config.token)
        if environ.get("NOVEL_API_TIMEOUT"):
            config.timeout = _as_int(environ["NOVEL_API_TIMEOUT"], config.timeout)
        if environ.get("NOVEL_TASK_POLL_INTERVAL"):
            try:
                config.task_poll_interval = float(environ["NOVEL_TASK_POLL_INTERVAL"])
            except ValueError:
                pass
        if environ.get("NOVEL_STREAM_READ_TIMEOUT"):
            try:
                config.read_timeout = float(environ["NOVEL_STREAM_READ_TIMEOUT"])
            except ValueError:
                pass
        return config

    def build_url(self, path: str) -> str:
        base = self.api_base_url.rstrip("/")
        if not path.startswith("/"):
            path = "/" + path
        return f"{base}/api{path}"


@dataclass
class ChapterOutline:
    """章節大綱"""
    index: int
    title: str = ""
    goal: str = ""
    hook: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChapterOutline":
        return cls(
            index=_as_int(data.get("index")),
            title=data.get("title") or "",
            goal=data.get("goal") or "",
            hook=data.get("hook") or "",
        )


@dataclass
class VolumeOutline:
    """分卷大綱，涵蓋 start_chapter 到 end_chapter"""
    title: str
    start_chapter: int
    end_chapter: int
    goal: str = ""
    conflict: str = ""
    climax: str = ""
    chapters: List[ChapterOutline] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VolumeOutline":
        chapters = data.get("chapters") or []
        return cls(
            title=data.get("title") or "",
            start_chapter=_as_int(data.get("startChapter")),
            end_chapter=_as_int(data.get("endChapter")),
            goal=data.get("goal") or "",
            conflict=data.get("conflict") or "",
            climax=data.get("climax") or "",
            chapters=[ChapterOutline.from_dict(c) for c in chapters if isinstance(c, dict)],
        )


@dataclass
class NovelOutline:
    """整體小說大綱"""
    total_chapters: int
    target_word_count: int
    volumes: List[VolumeOutline] = field(default_factory=list)
    main_goal: str = ""
    milestones: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NovelOutline":
        volumes = data.get("volumes") or []
        milestones = data.get("milestones") or []
        return cls(
            total_chapters=_as_int(data.get("totalChapters")),
            target_word_count=_as_int(data.get("targetWordCount")),
            volumes=[VolumeOutline.from_dict(v) for v in volumes if isinstance(v, dict)],
            main_goal=data.get("mainGoal") or "",
            milestones=[str(m) for m in milestones],
        )

    @property
    def chapter_count(self) -> int:
        return sum(len(volume.chapters) for volume in self.volumes)


@dataclass
class GeneratedChapter:
    """已生成的章節"""
    chapter: int
    title: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedChapter":
        chapter = _as_int(data.get("chapter"))
        return cls(chapter=chapter, title=data.get("title") or f"Chapter {chapter}")


@dataclass
class ChapterBatchResult:
    """批次章節生成結果"""
    generated: List[GeneratedChapter] = field(default_factory=list)
    failed_chapters: List[int] = field(default_factory=list)


@dataclass
class GenerationTask:
    """伺服器端的生成任務狀態（只讀）"""
    id: int
    target_count: int = 0
    completed_chapters: List[int] = field(default_factory=list)
    failed_chapters: List[int] = field(default_factory=list)
    current_progress: int = 0
    current_message: Optional[str] = None
    status: TaskStatus = TaskStatus.RUNNING
    updated_at: int = 0
    project_id: str = ""
    project_name: str = ""
    start_chapter: int = 0
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationTask":
        try:
            status = TaskStatus(data.get("status"))
        except ValueError:
            status = TaskStatus.RUNNING
        return cls(
            id=_as_int(data.get("id")),
            target_count=_as_int(data.get("targetCount")),
            completed_chapters=_as_int_list(data.get("completedChapters")),
            failed_chapters=_as_int_list(data.get("failedChapters")),
            current_progress=_as_int(data.get("currentProgress")),
            current_message=data.get("currentMessage"),
            status=status,
            updated_at=_as_int(data.get("updatedAt")),
            project_id=data.get("projectId") or "",
            project_name=data.get("projectName") or "",
            start_chapter=_as_int(data.get("startChapter")),
            error_message=data.get("errorMessage"),
        )

    @property
    def is_active(self) -> bool:
        return self.status in (TaskStatus.RUNNING, TaskStatus.PAUSED)

    @property
    def progress_percent(self) -> int:
        done = len(self.completed_chapters)
        percent = round(done / max(1, self.target_count) * 100)
        return max(0, min(100, percent))
