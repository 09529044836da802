"""
common.py

저장 레코드(pydantic) 모델이 공통으로 쓰는 기반 클래스와 시간 함수.

- 저장소의 JSON 레코드는 읽을 때마다 모델 검증을 거치며
  누락 / 잘못된 필드는 기본값으로 채워진다(스키마 변경 이전 데이터 호환)
- 알 수 없는 필드는 버린다(extra="ignore")

"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    def to_store(self) -> dict:
        return self.model_dump(mode="json")
