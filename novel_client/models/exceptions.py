"""
小說生成客戶端的例外類型定義
"""


class StreamClientException(Exception):
    """客戶端例外基類"""
    pass


class APIException(StreamClientException):
    """API傳輸相關例外（非2xx回應、連線失敗）"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class JSONParseException(StreamClientException):
    """JSON解析例外"""
    pass


class GenerationFailedException(StreamClientException):
    """伺服器回報生成失敗"""
    pass


class NoTerminalEventException(StreamClientException):
    """串流結束時沒有收到done或error事件"""
    pass


class StreamAbortedException(StreamClientException):
    """呼叫端中止了串流會話"""
    pass
