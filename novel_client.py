#!/usr/bin/env python3
"""
小說生成串流客戶端入口點
"""

import logging

from novel_client.cli import main

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logger.error(f"客戶端執行失敗: {str(e)}")
        raise
