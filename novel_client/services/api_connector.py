"""
API連接器模組
處理與生成伺服器之間的HTTP請求：開啟串流回應與讀取一般JSON端點
"""

import requests
import logging
from typing import Any, Callable, Dict

from ..models import ClientConfig, APIException, JSONParseException

# 配置日誌
logger = logging.getLogger(__name__)


class APIConnector:
    """生成伺服器API連接器"""

    def __init__(self, config: ClientConfig, debug_callback: Callable = None):
        self.config = config
        self.debug_callback = debug_callback or (lambda x: None)

    def _headers(self, include_ai: bool = False, streaming: bool = False) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        if include_ai:
            headers.update(self.config.ai.to_headers())
        if streaming:
            headers["Accept"] = "text/event-stream"
        return headers

    def open_stream(self, path: str, payload: Dict) -> requests.Response:
        """以POST開啟串流回應，非2xx狀態會拋出APIException"""
        url = self.config.build_url(path)
        logger.info(f"開啟串流: POST {url}")
        self.debug_callback(f"📤 開啟串流: {path}")

        try:
            response = requests.post(
                url,
                headers=self._headers(include_ai=True, streaming=True),
                json=payload,
                stream=True,
                timeout=(self.config.timeout, self.config.read_timeout)
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"串流連線失敗: {str(e)}")
            raise APIException(f"API連線失敗: {str(e)}") from e

        if not self._is_ok(response):
            try:
                raise self._error_from_response(response)
            finally:
                response.close()

        return response

    def get_json(self, path: str) -> Any:
        """調用GET端點並回傳JSON內容，連線失敗時重試"""
        url = self.config.build_url(path)
        attempts = max(1, self.config.max_retries)

        for attempt in range(attempts):
            try:
                logger.debug(f"GET {url} (嘗試 {attempt + 1}/{attempts})")
                response = requests.get(url, headers=self._headers(), timeout=self.config.timeout)
                break
            except requests.exceptions.RequestException as e:
                logger.warning(f"API調用失敗 (嘗試 {attempt + 1}): {str(e)}")
                if attempt == attempts - 1:
                    raise APIException(f"API調用失敗，已重試 {attempts} 次: {str(e)}") from e

        return self._read_envelope(response)

    def post_json(self, path: str, payload: Dict = None, default_error: str = None) -> Any:
        """調用POST控制端點，不重試"""
        url = self.config.build_url(path)
        logger.info(f"POST {url}")
        self.debug_callback(f"📤 {path}")

        try:
            response = requests.post(
                url, headers=self._headers(), json=payload or {}, timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"API調用失敗: {str(e)}")
            raise APIException(f"API連線失敗: {str(e)}") from e

        return self._read_envelope(response, default_error)

    def _read_envelope(self, response, default_error: str = None) -> Any:
        """解析JSON回應，success 為 False 時拋出APIException"""
        if not self._is_ok(response):
            raise self._error_from_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise JSONParseException(f"無法解析回應內容: HTTP {response.status_code}") from e

        if isinstance(data, dict) and data.get("success") is False:
            raise APIException(
                data.get("error") or default_error or f"HTTP {response.status_code}",
                status_code=response.status_code
            )
        return data

    @staticmethod
    def _is_ok(response) -> bool:
        return 200 <= response.status_code < 300

    @staticmethod
    def _error_from_response(response) -> APIException:
        """從錯誤回應中取出伺服器訊息"""
        status = response.status_code
        message = None
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
        except ValueError:
            pass

        logger.error(f"API回應錯誤: HTTP {status} {message or ''}".rstrip())
        return APIException(message or f"HTTP {status}", status_code=status)
