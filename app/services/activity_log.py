"""
services/activity_log.py

활동 기록(Activity Log) 서비스.

이 파일은 사용자 / 관리자가 수행한 업무 이벤트를
활동 로그 컬렉션에 기록하고 조회하는 역할을 담당한다.

서비스 계층(identity, ledger)에서 호출되며,
로그 기록은 같은 요청의 트랜잭션 안에서 함께 커밋된다.

설계 원칙:
- 새 로그는 맨 앞에 추가(최신순), 최근 ACTIVITY_LOG_RETENTION 개만 보관
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- 기록 시에는 저장된 원본 컬렉션만 읽는다 (예시 로그를 섞지 않음)

"""

from datetime import timedelta

import structlog

from app.core.config import settings
from app.db.store import Store, ACTIVITY_LOGS
from app.models.activity_log import ActivityAction, ActivityLog
from app.models.common import utcnow
from app.services.users import SUPERADMIN_ID, get_user

logger = structlog.get_logger(__name__)


def _load_logs(store: Store) -> list[ActivityLog]:
    return [ActivityLog.model_validate(raw) for raw in store.get(ACTIVITY_LOGS)]


def _resolve_username(store: Store, actor_id: int | None) -> str:
    if actor_id is None:
        return "system"
    user = get_user(store, actor_id)
    return user.username if user else "unknown"


"""
활동 기록 함수

- action         : 업무 이벤트 유형
- details        : 사람이 읽는 설명
- tontine_id     : 관련 톤틴 ID (선택)
- actor_id       : 행위자 ID (선택, 없으면 "system")
- target_user_id : 행위 대상 사용자 ID (선택)

NOTE:
- 커밋은 호출 측(라우터)에서 수행

"""
def record_activity(
    store: Store,
    action: ActivityAction,
    details: str,
    *,
    tontine_id: str | None = None,
    actor_id: int | None = None,
    target_user_id: int | None = None,
) -> ActivityLog:
    logs = _load_logs(store)

    entry = ActivityLog(
        id=max([0, *(log.id for log in logs)]) + 1,
        action=action.value,
        details=details,
        username=_resolve_username(store, actor_id),
        tontine_id=tontine_id,
        target_user_id=target_user_id,
        user_id=actor_id,
    )

    retained = [entry, *logs][: settings.ACTIVITY_LOG_RETENTION]
    store.set(ACTIVITY_LOGS, [log.to_store() for log in retained])

    logger.info(
        "activity_recorded",
        action=entry.action,
        details=details,
        tontine_id=tontine_id,
        actor_id=actor_id,
        target_user_id=target_user_id,
    )
    return entry


def _example_logs() -> list[ActivityLog]:
    now = utcnow()
    return [
        ActivityLog(
            id=1,
            action=ActivityAction.CREATE_TONTINE.value,
            details="Created tontine Family 2024",
            username=settings.SUPERADMIN_USERNAME,
            created_at=now,
            user_id=SUPERADMIN_ID,
        ),
        ActivityLog(
            id=2,
            action=ActivityAction.ADD_PARTICIPANT.value,
            details="Added a new participant",
            username=settings.SUPERADMIN_USERNAME,
            created_at=now - timedelta(hours=1),
            user_id=SUPERADMIN_ID,
        ),
        ActivityLog(
            id=3,
            action=ActivityAction.SET_PAYMENT.value,
            details="Changed a payment status",
            username=settings.SUPERADMIN_USERNAME,
            created_at=now - timedelta(hours=2),
            user_id=SUPERADMIN_ID,
        ),
    ]


"""
활동 기록 조회

- 최신순으로 최대 limit 개 반환
- owner_id 지정 시 해당 사용자가 행위자인 로그만 반환
- 전체 조회인데 로그가 하나도 없으면 예시 로그 3건을 저장 후 반환
  (SEED_EXAMPLE_LOGS 설정)

"""

def list_activity_logs(store: Store, limit: int = 50, owner_id: int | None = None) -> list[ActivityLog]:
    logs = _load_logs(store)

    if owner_id is not None:
        return [log for log in logs if log.user_id == owner_id][:limit]

    if not logs and settings.SEED_EXAMPLE_LOGS:
        logs = _example_logs()
        store.set(ACTIVITY_LOGS, [log.to_store() for log in logs])

    return logs[:limit]
