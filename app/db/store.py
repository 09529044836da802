"""
store.py

컬렉션 단위 key/value 저장소(Store).

논리 테이블 이름을 key로, 레코드 목록(JSON 배열)을 value로 저장한다.
서비스 계층은 이 객체를 인자로 받아 사용하며
(전역 싱글톤이 아니라 요청마다 세션 위에 생성),
테스트에서는 in-memory SQLite 세션으로 새 Store를 만들어 쓴다.

주요 기능:
- get(key)        : 컬렉션 전체 조회 (없으면 빈 리스트)
- set(key, value) : 컬렉션 전체 덮어쓰기

설계 원칙:
- 부분 업데이트 없음: 읽기 → 메모리에서 수정 → 전체 쓰기
- flush까지만 수행하고 commit은 호출 측(라우터)에서 수행
- 반환 값은 깊은 복사본이라 호출 측 수정이 세션 상태에 새지 않음

관련 파일:
- app.models.kv_store    : 실제 저장 테이블
- app.core.deps          : get_store 의존성

"""

import copy

import structlog
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from app.models.kv_store import KeyValueEntry

logger = structlog.get_logger(__name__)


# 논리 테이블 이름
TONTINES = "tontines"
USERS = "users"
REGISTRATION_REQUESTS = "registration-requests"
ACTIVITY_LOGS = "activity-logs"
VISITORS = "visitors"


class Store:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> list:
        entry = self.db.get(KeyValueEntry, key)
        if entry is None or not entry.value:
            return []
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: list) -> None:
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            entry = KeyValueEntry(key=key, value=value)
            self.db.add(entry)
        else:
            entry.value = value
            # JSON 컬럼은 내용 비교로 변경을 놓칠 수 있어서 명시적으로 표시
            flag_modified(entry, "value")
        self.db.flush()
        logger.debug("store_write", key=key, size=len(value))
