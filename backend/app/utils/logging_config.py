# backend/app/utils/logging_config.py

"""
アプリ全体のログ設定。
"""

import logging


def configure_logging(level: str = "INFO") -> None:
    """
    標準 logging を初期化する。

    - uvicorn 起動前に一度だけ呼ぶ想定
    - httpx / httpcore のリクエストログは WARNING 以上に抑える
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
