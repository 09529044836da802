from datetime import timedelta

from app.core.config import settings
from app.db.store import VISITORS
from app.models.common import utcnow
from app.models.visitor import VisitStatus
from app.services.visitors import list_visitors, record_visitor, visitor_stats


def test_record_visitor_defaults(store):
    anonymous = record_visitor(store)
    assert anonymous.ip == "local"
    assert anonymous.user_agent == "unknown"
    assert anonymous.path == "/"
    assert anonymous.status == VisitStatus.ANONYMOUS

    known = record_visitor(store, ip="10.0.0.1", user_agent="pytest", path="/tontines", user_id=2)
    assert known.status == VisitStatus.AUTHENTICATED
    assert [v.id for v in list_visitors(store)] == [known.id, anonymous.id]


def test_visitor_retention(store):
    for _ in range(settings.VISITOR_RETENTION + 5):
        record_visitor(store)
    assert len(store.get(VISITORS)) == settings.VISITOR_RETENTION


def test_visitor_stats(store):
    now = utcnow()
    store.set(VISITORS, [
        {"id": 4, "visited_at": now.isoformat(), "user_id": 2, "status": "authenticated"},
        {"id": 3, "visited_at": (now - timedelta(days=2)).isoformat()},
        {"id": 2, "visited_at": (now - timedelta(days=6)).isoformat()},
        {"id": 1, "visited_at": (now - timedelta(days=30)).isoformat()},
    ])

    assert visitor_stats(store, now=now) == {
        "total": 4,
        "today": 1,
        "last_7_days": 3,
        "authenticated": 1,
        "anonymous": 3,
    }
