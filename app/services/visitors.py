"""
services/visitors.py

방문자 기록 서비스.

- 방문 1건마다 최신순으로 추가, 최근 VISITOR_RETENTION 개만 보관
- user_id 가 있으면 authenticated, 없으면 anonymous
- 통계: 전체 / 오늘 / 최근 7일 / 로그인 / 비로그인 방문 수

"""

from datetime import datetime, timedelta

import structlog

from app.core.config import settings
from app.db.store import Store, VISITORS
from app.models.common import utcnow
from app.models.visitor import Visitor, VisitStatus

logger = structlog.get_logger(__name__)


def _load_visitors(store: Store) -> list[Visitor]:
    return [Visitor.model_validate(raw) for raw in store.get(VISITORS)]


def record_visitor(
    store: Store,
    *,
    ip: str | None = None,
    user_agent: str | None = None,
    path: str | None = None,
    user_id: int | None = None,
) -> Visitor:
    visitors = _load_visitors(store)

    visitor = Visitor(
        id=max([0, *(v.id for v in visitors)]) + 1,
        ip=ip or "local",
        user_agent=user_agent or "unknown",
        path=path or "/",
        user_id=user_id,
        status=VisitStatus.AUTHENTICATED if user_id is not None else VisitStatus.ANONYMOUS,
    )

    retained = [visitor, *visitors][: settings.VISITOR_RETENTION]
    store.set(VISITORS, [v.to_store() for v in retained])

    logger.debug("visitor_recorded", path=visitor.path, status=visitor.status.value)
    return visitor


def list_visitors(store: Store, limit: int = 50) -> list[Visitor]:
    return _load_visitors(store)[:limit]


"""
방문 통계

- today       : now 와 같은 날짜(UTC)의 방문
- last_7_days : now - 7일 이후의 방문

"""

def visitor_stats(store: Store, now: datetime | None = None) -> dict:
    now = now or utcnow()
    visitors = _load_visitors(store)
    week_ago = now - timedelta(days=7)

    authenticated = sum(1 for v in visitors if v.status == VisitStatus.AUTHENTICATED)
    return {
        "total": len(visitors),
        "today": sum(1 for v in visitors if v.visited_at.date() == now.date()),
        "last_7_days": sum(1 for v in visitors if v.visited_at >= week_ago),
        "authenticated": authenticated,
        "anonymous": len(visitors) - authenticated,
    }
