"""
小說生成客戶端的數據模型模組
"""

from .enums import StreamEventType, GenerationKind, SessionState, TaskStatus
from .data_models import (
    DEFAULT_TASK_POLL_INTERVAL, PROJECT_TASK_POLL_INTERVAL,
    AIOverride, ClientConfig, ChapterOutline, VolumeOutline, NovelOutline,
    GeneratedChapter, ChapterBatchResult, GenerationTask
)
from .events import (
    StreamEvent, HeartbeatEvent, StartEvent, ProgressEvent, MasterOutlineEvent,
    VolumeCompleteEvent, ChapterCompleteEvent, ChapterErrorEvent, DoneEvent,
    ErrorEvent, TaskCreatedEvent, TaskResumedEvent, UnknownEvent, parse_stream_event
)
from .exceptions import (
    StreamClientException, APIException, JSONParseException,
    GenerationFailedException, NoTerminalEventException, StreamAbortedException
)

__all__ = [
    'StreamEventType', 'GenerationKind', 'SessionState', 'TaskStatus',
    'DEFAULT_TASK_POLL_INTERVAL', 'PROJECT_TASK_POLL_INTERVAL',
    'AIOverride', 'ClientConfig', 'ChapterOutline', 'VolumeOutline', 'NovelOutline',
    'GeneratedChapter', 'ChapterBatchResult', 'GenerationTask',
    'StreamEvent', 'HeartbeatEvent', 'StartEvent', 'ProgressEvent', 'MasterOutlineEvent',
    'VolumeCompleteEvent', 'ChapterCompleteEvent', 'ChapterErrorEvent', 'DoneEvent',
    'ErrorEvent', 'TaskCreatedEvent', 'TaskResumedEvent', 'UnknownEvent', 'parse_stream_event',
    'StreamClientException', 'APIException', 'JSONParseException',
    'GenerationFailedException', 'NoTerminalEventException', 'StreamAbortedException'
]
