"""JSON API endpoints with simple token auth."""

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from h2o_tender.api.schemas import (
    AmountIn,
    DailyStateOut,
    HistoryOut,
    ProfileIn,
    ProfileOut,
    ProfilePatch,
    ReminderOut,
    ScheduleOut,
    SkipOut,
    TodayOut,
)
from h2o_tender.services.daily_state import DailyStateService
from h2o_tender.services.profiles import create_profile

if TYPE_CHECKING:
    from h2o_tender.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(dependencies=[Depends(require_api_token)], tags=["hydration"])


def _service(request: Request) -> DailyStateService:
    container: AppContainer = request.app.state.container
    return container.daily_state_service


@router.get("/today")
async def today(request: Request) -> TodayOut:
    """Return today's ledger and reminder status."""
    service = _service(request)
    await service.current()
    return TodayOut.from_service(service)


@router.get("/schedule")
async def schedule(request: Request) -> ScheduleOut:
    """Return today's full plan and the reminders still ahead."""
    service = _service(request)
    await service.current()
    return ScheduleOut(
        plan=[ReminderOut.from_slot(slot) for slot in service.schedule()],
        upcoming=[ReminderOut.from_slot(slot) for slot in service.upcoming_reminders()],
    )


@router.post("/consumption")
async def record_consumption(payload: AmountIn, request: Request) -> TodayOut:
    """Log a drink outside of a reminder."""
    service = _service(request)
    await service.record_consumption(payload.amount_ml)
    return TodayOut.from_service(service)


@router.post("/reminders/complete")
async def complete_reminder(request: Request) -> TodayOut:
    """Mark the current reminder as completed."""
    service = _service(request)
    await service.complete_reminder()
    return TodayOut.from_service(service)


@router.post("/reminders/drink")
async def drink_reminder(payload: AmountIn, request: Request) -> TodayOut:
    """Log the reminder's amount and mark it completed."""
    service = _service(request)
    await service.record_reminder_drink(payload.amount_ml)
    return TodayOut.from_service(service)


@router.post("/reminders/skip")
async def skip_reminder(request: Request) -> SkipOut:
    """Skip the current reminder and redistribute the rest of the goal."""
    service = _service(request)
    outcome = await service.skip_reminder()
    return SkipOut.from_outcome(outcome, service)


@router.get("/profile")
async def get_profile(request: Request) -> ProfileOut:
    """Return the current profile."""
    return ProfileOut.from_profile(_service(request).profile)


@router.post("/profile", status_code=status.HTTP_201_CREATED)
async def onboard(payload: ProfileIn, request: Request) -> ProfileOut:
    """Create the profile and start tracking today."""
    service = _service(request)
    profile = create_profile(
        weight_kg=payload.weight_kg(),
        activity=payload.activity,
        climate=payload.climate,
        wake_time=payload.wake_time,
        sleep_time=payload.sleep_time,
        reminder_frequency=payload.reminder_frequency,
        weight_unit=payload.weight_unit,
        age=payload.age,
        location_name=payload.location_name,
    )
    await service.onboard(profile)
    return ProfileOut.from_profile(service.profile)


@router.put("/profile")
async def update_profile(payload: ProfilePatch, request: Request) -> ProfileOut:
    """Apply a settings change."""
    service = _service(request)
    profile = await service.update_profile(
        payload.to_update(service.profile.weight_unit)
    )
    return ProfileOut.from_profile(profile)


@router.post("/day/reset")
async def reset_day(request: Request) -> TodayOut:
    """Start today over."""
    service = _service(request)
    await service.reset_day()
    return TodayOut.from_service(service)


@router.get("/history")
async def history(request: Request, limit: int = 7) -> HistoryOut:
    """Return recent days, newest first."""
    container: AppContainer = request.app.state.container
    states = await container.history_service.list_states(limit)
    return HistoryOut(days=[DailyStateOut.from_state(state) for state in states])
