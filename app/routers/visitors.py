"""
visitors.py

방문 기록 API.

- 프론트엔드가 페이지 진입 시 호출
- 로그인 토큰이 있으면 authenticated, 없으면 anonymous 로 기록
- IP / User-Agent 는 요청 정보에서 채움

"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_store, get_optional_user
from app.db.store import Store
from app.models.user import User
from app.schemas.activity import VisitRequest, VisitorResponse
from app.services.visitors import record_visitor

router = APIRouter(prefix="/visitors", tags=["visitors"])


@router.post("", status_code=status.HTTP_201_CREATED)
def record_visit(
    request: Request,
    body: VisitRequest | None = None,
    db: Session = Depends(get_db),
    store: Store = Depends(get_store),
    user: User | None = Depends(get_optional_user),
):
    try:
        visitor = record_visitor(
            store,
            ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            path=body.path if body else None,
            user_id=user.id if user else None,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {"data": VisitorResponse.model_validate(visitor)}
