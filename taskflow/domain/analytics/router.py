"""Analytics router - dashboard and chart data"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


@router.get("/dashboard")
def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Open/not-started counts and this month's completions, hours and revenue"""
    return service.dashboard(current_user)


@router.get("/tasks")
def get_task_stats(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.task_stats(current_user)


@router.get("/clients")
def get_client_analytics(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Finished work and earnings per client"""
    return service.client_analytics(current_user)


@router.get("/client-summary")
def get_client_summary(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.client_summary(current_user)


@router.get("/weekly")
def get_weekly_analytics(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Tasks completed and hours worked over the last 7 days"""
    return service.weekly(current_user)


@router.get("/monthly")
def get_monthly_analytics(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.monthly(current_user)
