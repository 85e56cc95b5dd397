"""
小說生成客戶端的枚舉類型定義
"""

from enum import Enum


class StreamEventType(Enum):
    """串流事件類型枚舉"""
    HEARTBEAT = "heartbeat"
    START = "start"
    PROGRESS = "progress"
    MASTER_OUTLINE = "master_outline"
    VOLUME_COMPLETE = "volume_complete"
    CHAPTER_COMPLETE = "chapter_complete"
    CHAPTER_ERROR = "chapter_error"
    DONE = "done"
    ERROR = "error"
    TASK_RESUMED = "task_resumed"
    TASK_CREATED = "task_created"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value) -> "StreamEventType":
        """將線上的type字段轉換為枚舉，未知值歸為UNKNOWN"""
        for event_type in cls:
            if event_type is not cls.UNKNOWN and event_type.value == value:
                return event_type
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (StreamEventType.DONE, StreamEventType.ERROR)


class GenerationKind(Enum):
    """生成任務種類"""
    OUTLINE = "outline"
    CHAPTERS = "chapters"


class SessionState(Enum):
    """串流會話狀態"""
    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"
    ERRORED = "errored"


class TaskStatus(Enum):
    """伺服器端任務狀態"""
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"
