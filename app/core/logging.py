"""
logging.py

structlog 기반 구조화 로깅 설정 파일.

- 애플리케이션 시작 시 한 번만 configure_logging()을 호출한다
- 각 모듈은 structlog.get_logger(__name__)으로 로거를 얻어 사용한다
- 운영 환경은 JSON, 로컬 개발은 콘솔 렌더러 사용

NOTE:
- 여기서 남기는 로그는 운영 추적용이다
- 사용자에게 보여주는 활동 기록(Activity Log)은 app.services.activity_log에서 별도로 저장한다

"""

import logging
import sys

import structlog

from app.core.config import settings


def configure_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
