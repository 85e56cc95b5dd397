"""
小說生成客戶端的裝飾器工具
"""

import functools
import logging
import traceback
from typing import Callable

from ..models.exceptions import StreamAbortedException

logger = logging.getLogger(__name__)


def log_execution(func: Callable) -> Callable:
    """記錄服務方法的開始、完成與失敗，例外一律重新拋出"""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            logger.info(f"開始執行函數：{func.__name__}")
            result = func(self, *args, **kwargs)
            logger.info(f"函數執行完成：{func.__name__}")
            return result
        except StreamAbortedException:
            logger.info(f"{func.__name__} 已被中止")
            raise
        except Exception as e:
            error_msg = f"執行 {func.__name__} 時發生錯誤: {str(e)}"
            logger.error(error_msg)
            logger.debug(traceback.format_exc())
            if hasattr(self, 'debug_callback'):
                self.debug_callback(f"❌ {error_msg}")
            raise
    return wrapper
