"""
小說生成客戶端的服務模組
"""

from .api_connector import APIConnector
from .transport import StreamTransport
from .generation_service import GenerationService
from .task_poller import TaskPoller

__all__ = ['APIConnector', 'StreamTransport', 'GenerationService', 'TaskPoller']
