"""

kv_store.py

key/value 저장소 테이블 모델 정의 파일.

도메인 데이터(톤틴, 사용자, 가입 요청, 활동 로그, 방문자)는
레코드 단위 테이블이 아니라 "논리 테이블 이름 → JSON 배열" 형태로
이 테이블의 한 행(row)에 통째로 저장된다.

설계 원칙:
- 부분 업데이트 / 인덱스 / 트랜잭션 단위 병합 없음
- 항상 컬렉션 전체를 읽고, 수정하고, 전체를 다시 쓴다
- 동시에 여러 writer가 쓰면 마지막 쓰기가 이긴다(last write wins)

"""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueEntry(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
