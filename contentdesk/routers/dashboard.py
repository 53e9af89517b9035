from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.core.settings import settings
from contentdesk.db.session import get_db
from contentdesk.models.user import User
from contentdesk.schemas.dashboard import (
    DashboardOverview,
    ProductivityStats,
    RecentActivity,
    UpcomingDeadlines,
)
from contentdesk.services.dashboard import (
    InvalidPeriodError,
    compute_overview,
    productivity_stats,
    recent_activity,
    upcoming_deadlines,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/overview", response_model=DashboardOverview)
def get_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DashboardOverview:
    return compute_overview(db, user_id=current_user.id)


@router.get("/recent-activity", response_model=RecentActivity)
def get_recent_activity(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> RecentActivity:
    activities = recent_activity(
        db,
        user_id=current_user.id,
        limit=limit or settings.dashboard_activity_limit,
        per_type=settings.dashboard_activity_per_type,
    )
    return RecentActivity(activities=activities)


@router.get("/upcoming-deadlines", response_model=UpcomingDeadlines)
def get_upcoming_deadlines(
    days: Optional[int] = Query(None, ge=1, le=365),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UpcomingDeadlines:
    deadlines = upcoming_deadlines(
        db,
        user_id=current_user.id,
        days=days or settings.dashboard_deadline_days,
        limit=limit or settings.dashboard_activity_limit,
    )
    return UpcomingDeadlines(deadlines=deadlines)


@router.get("/productivity-stats", response_model=ProductivityStats)
def get_productivity_stats(
    period: str = Query("week"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProductivityStats:
    try:
        return productivity_stats(db, user_id=current_user.id, period=period)
    except InvalidPeriodError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
