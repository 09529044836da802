from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.visitor import VisitStatus


class ActivityLogResponse(BaseModel):
    id: int
    action: str
    details: str
    username: str
    created_at: datetime
    tontine_id: str | None
    target_user_id: int | None
    user_id: int | None

    model_config = ConfigDict(from_attributes=True)


class VisitRequest(BaseModel):
    path: str = "/"


class VisitorResponse(BaseModel):
    id: int
    ip: str
    user_agent: str
    path: str
    visited_at: datetime
    user_id: int | None
    status: VisitStatus

    model_config = ConfigDict(from_attributes=True)


class VisitorStatsResponse(BaseModel):
    total: int
    today: int
    last_7_days: int
    authenticated: int
    anonymous: int
