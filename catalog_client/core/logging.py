"""로깅 설정 (Security Enhanced)"""
import logging
import re
import sys
from typing import Any
import os
from catalog_client.core.config import settings


# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정"""

    logger = logging.getLogger("catalog_client")

    # Production에서는 최소 INFO 레벨
    log_level = settings.log_level.upper()
    if IS_PRODUCTION and log_level == "DEBUG":
        log_level = "INFO"

    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # 콘솔 핸들러
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level, logging.INFO))

    # 포맷터 (민감 정보 제외)
    if IS_PRODUCTION:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(console_handler)

    return logger


logger = setup_logging()


# 자격 증명으로 보이는 값 (앞부분 키는 남기고 값만 가림)
_SECRET_PATTERNS = [
    re.compile(r"(?i)(bearer\s+)[^\s,;\"']+"),
    re.compile(r"(?i)((?:admin_?token|token|password|api_?key|secret)\"?\s*[:=]\s*\"?)[^\s,;&\"'}]+"),
]


def sanitize_for_log(value: Any, max_length: int = 200) -> str:
    """민감 정보 마스킹 후 로깅용 문자열 반환

    Args:
        value: 로깅할 값 (문자열이 아니면 str() 변환)
        max_length: 최대 길이

    Returns:
        마스킹/절단된 문자열
    """
    if value is None or value == "":
        return "[empty]"

    result = value if isinstance(value, str) else str(value)
    for pattern in _SECRET_PATTERNS:
        result = pattern.sub(r"\1***", result)

    if len(result) > max_length:
        result = result[:max_length] + "..."
    return result


def mask_token(token: str | None) -> str:
    """인증 토큰을 앞 4자리만 남기고 마스킹"""
    if not token:
        return "[none]"
    if len(token) <= 4:
        return "***"
    return f"{token[:4]}***"
