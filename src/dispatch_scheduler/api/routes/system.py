from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.core.config import Settings, get_settings
from dispatch_scheduler.db.session import get_db_session
from dispatch_scheduler.repositories import system as system_repo
from dispatch_scheduler.schemas.system import HolidayCreate, HolidayRead, StaffingAlertRead
from dispatch_scheduler.services.rules import SchedulingRules, load_default_rules

router = APIRouter()


@router.get("/settings")
async def read_settings(
    settings: Annotated[Settings, Depends(get_settings)]
) -> dict[str, str]:
    """Expose basic runtime metadata for diagnostics."""
    return {
        "environment": settings.environment,
        "project": settings.project_name,
        "version": settings.version,
    }


@router.get("/rules", response_model=SchedulingRules)
async def read_default_rules() -> SchedulingRules:
    return load_default_rules().rules


@router.get("/holidays", response_model=list[HolidayRead])
async def list_holidays(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[HolidayRead]:
    holidays = await system_repo.list_holidays(session)
    return [HolidayRead.model_validate(holiday) for holiday in holidays]


@router.post("/holidays", response_model=HolidayRead, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    payload: HolidayCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> HolidayRead:
    holiday = await system_repo.create_holiday(session, payload)
    await session.commit()
    return HolidayRead.model_validate(holiday)


@router.get("/alerts", response_model=list[StaffingAlertRead])
async def list_staffing_alerts(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    alert_status: Annotated[str | None, Query(alias="status")] = None,
) -> list[StaffingAlertRead]:
    alerts = await system_repo.list_staffing_alerts(session, status=alert_status)
    return [StaffingAlertRead.model_validate(alert) for alert in alerts]
