"""
小說生成客戶端的串流核心模組
"""

from .chunk_buffer import ChunkBuffer
from .event_decoder import EventDecoder
from .reconciler import (
    StreamReconciler, OutlineReconciler, ChapterBatchReconciler, create_reconciler
)
from .stream_session import StreamSession

__all__ = [
    'ChunkBuffer', 'EventDecoder', 'StreamReconciler', 'OutlineReconciler',
    'ChapterBatchReconciler', 'create_reconciler', 'StreamSession'
]
