"""
visitor.py

방문자(Visitor) 기록 레코드.

- 페이지 방문마다 한 건씩 최신순으로 추가, 최근 N개(기본 100개)만 보관
- 활동 로그와는 독립적으로 저장된다

"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.common import StoredRecord, utcnow


class VisitStatus(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class Visitor(StoredRecord):
    id: int
    ip: str = "local"
    user_agent: str = "unknown"
    path: str = "/"
    visited_at: datetime = Field(default_factory=utcnow)
    user_id: int | None = None
    status: VisitStatus = VisitStatus.ANONYMOUS
