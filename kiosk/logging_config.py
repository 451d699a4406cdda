"""
로깅 설정
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """루트 로거에 스트림 핸들러 하나만 등록"""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_kiosk_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._kiosk_handler = True
        root.addHandler(handler)
