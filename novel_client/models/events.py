"""
串流事件模型

伺服器以 `data: <json>` 行送出事件，每個JSON物件以 `type` 字段區分種類。
這裡把每一種事件定義為獨立的dataclass，並由 parse_stream_event 依 type 建立。
未知的 type 不會被拒絕，而是轉為 UnknownEvent 以保持前向相容。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from .enums import StreamEventType
from .data_models import NovelOutline, GeneratedChapter, _as_int, _as_int_list


def _optional_int(value) -> Optional[int]:
    if value is None:
        return None
    return _as_int(value, None)


@dataclass
class StreamEvent:
    """串流事件基類"""
    type: StreamEventType
    message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.type.is_terminal

    @classmethod
    def _fields_from(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, event_type: StreamEventType, data: Dict[str, Any]) -> "StreamEvent":
        message = data.get("message")
        return cls(
            type=event_type,
            message=str(message) if message is not None else None,
            raw=data,
            **cls._fields_from(data),
        )


@dataclass
class HeartbeatEvent(StreamEvent):
    """保活事件，不攜帶任何語意"""
    pass


@dataclass
class StartEvent(StreamEvent):
    total: Optional[int] = None
    total_volumes: Optional[int] = None
    task_id: Optional[int] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "total": _optional_int(data.get("total")),
            "total_volumes": _optional_int(data.get("totalVolumes")),
            "task_id": _optional_int(data.get("taskId")),
        }


@dataclass
class ProgressEvent(StreamEvent):
    current: Optional[int] = None
    total: Optional[int] = None
    chapter_index: Optional[int] = None
    status: Optional[str] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "current": _optional_int(data.get("current")),
            "total": _optional_int(data.get("total")),
            "chapter_index": _optional_int(data.get("chapterIndex")),
            "status": data.get("status"),
        }


@dataclass
class MasterOutlineEvent(StreamEvent):
    total_volumes: Optional[int] = None
    main_goal: Optional[str] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "total_volumes": _optional_int(data.get("totalVolumes")),
            "main_goal": data.get("mainGoal"),
        }


@dataclass
class VolumeCompleteEvent(StreamEvent):
    volume_index: Optional[int] = None
    total_volumes: Optional[int] = None
    volume_title: Optional[str] = None
    chapter_count: Optional[int] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "volume_index": _optional_int(data.get("volumeIndex")),
            # 追加分卷時伺服器以 total 表示本次要生成的卷數
            "total_volumes": _optional_int(data.get("totalVolumes", data.get("total"))),
            "volume_title": data.get("volumeTitle"),
            "chapter_count": _optional_int(data.get("chapterCount")),
        }


@dataclass
class ChapterCompleteEvent(StreamEvent):
    chapter_index: Optional[int] = None
    title: Optional[str] = None
    preview: Optional[str] = None
    word_count: Optional[int] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "chapter_index": _optional_int(data.get("chapterIndex")),
            "title": data.get("title"),
            "preview": data.get("preview"),
            "word_count": _optional_int(data.get("wordCount")),
        }


@dataclass
class ChapterErrorEvent(StreamEvent):
    chapter_index: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "chapter_index": _optional_int(data.get("chapterIndex")),
            "error": data.get("error"),
        }


@dataclass
class DoneEvent(StreamEvent):
    """終止事件：success為False時error為伺服器訊息"""
    success: bool = False
    error: Optional[str] = None
    outline: Optional[NovelOutline] = None
    generated: Optional[List[GeneratedChapter]] = None
    failed_chapters: Optional[List[int]] = None

    @classmethod
    def _fields_from(cls, data):
        outline = data.get("outline")
        generated = data.get("generated")
        failed = data.get("failedChapters")
        return {
            "success": bool(data.get("success")),
            "error": data.get("error"),
            "outline": NovelOutline.from_dict(outline) if isinstance(outline, dict) else None,
            "generated": (
                [GeneratedChapter.from_dict(g) for g in generated if isinstance(g, dict)]
                if isinstance(generated, list) else None
            ),
            "failed_chapters": _as_int_list(failed) if isinstance(failed, list) else None,
        }


@dataclass
class ErrorEvent(StreamEvent):
    error: Optional[str] = None

    @classmethod
    def _fields_from(cls, data):
        return {"error": data.get("error")}


@dataclass
class TaskCreatedEvent(StreamEvent):
    task_id: Optional[int] = None

    @classmethod
    def _fields_from(cls, data):
        return {"task_id": _optional_int(data.get("taskId"))}


@dataclass
class TaskResumedEvent(StreamEvent):
    task_id: Optional[int] = None
    completed_chapters: List[int] = field(default_factory=list)
    target_count: Optional[int] = None
    current_progress: Optional[int] = None
    current_message: Optional[str] = None

    @classmethod
    def _fields_from(cls, data):
        return {
            "task_id": _optional_int(data.get("taskId")),
            "completed_chapters": _as_int_list(data.get("completedChapters")),
            "target_count": _optional_int(data.get("targetCount")),
            "current_progress": _optional_int(data.get("currentProgress")),
            "current_message": data.get("currentMessage"),
        }


@dataclass
class UnknownEvent(StreamEvent):
    """未知類型的事件，僅供資訊顯示"""
    pass


EVENT_CLASSES = {
    StreamEventType.HEARTBEAT: HeartbeatEvent,
    StreamEventType.START: StartEvent,
    StreamEventType.PROGRESS: ProgressEvent,
    StreamEventType.MASTER_OUTLINE: MasterOutlineEvent,
    StreamEventType.VOLUME_COMPLETE: VolumeCompleteEvent,
    StreamEventType.CHAPTER_COMPLETE: ChapterCompleteEvent,
    StreamEventType.CHAPTER_ERROR: ChapterErrorEvent,
    StreamEventType.DONE: DoneEvent,
    StreamEventType.ERROR: ErrorEvent,
    StreamEventType.TASK_RESUMED: TaskResumedEvent,
    StreamEventType.TASK_CREATED: TaskCreatedEvent,
    StreamEventType.UNKNOWN: UnknownEvent,
}


def parse_stream_event(data: Dict[str, Any]) -> StreamEvent:
    """由解析後的JSON物件建立對應的事件"""
    event_type = StreamEventType.from_wire(data.get("type"))
    return EVENT_CLASSES[event_type].from_dict(event_type, data)
