from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import StreamingResponse

from ...core.security import resolve_authenticated_user
from ...insights import DataFetchError, DateRange, MoodInsightsEngine, SnapshotCache
from ...metrics import USER_API_COUNTER
from ...schemas.analytics import MoodSnapshotResponse
from ...schemas.journal import (
    JournalCreate,
    JournalCreateResponse,
    JournalEntryModel,
    JournalListResponse,
)
from ...schemas.mood import (
    MoodCalendarResponse,
    MoodCreate,
    MoodEntryModel,
    MoodListResponse,
    MoodUpsertResponse,
)
from ...services.storage import StorageService

router = APIRouter(prefix="/api/v1", tags=["core"])


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


def get_insights_engine(request: Request) -> MoodInsightsEngine:
    return request.app.state.insights_engine


def get_snapshot_cache(request: Request) -> SnapshotCache:
    return request.app.state.snapshot_cache


def _optional_range(start: date | None, end: date | None) -> DateRange | None:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start and end must be given together",
        )
    try:
        return DateRange(start, end)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


def _parse_month(value: str | None) -> date:
    if value is None:
        return date.today().replace(day=1)
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="month must look like YYYY-MM",
        ) from exc


@router.post("/mood", response_model=MoodUpsertResponse)
async def upsert_mood_entry(
    payload: MoodCreate,
    response: Response,
    storage: StorageService = Depends(get_storage_service),
    cache: SnapshotCache = Depends(get_snapshot_cache),
    user_id: int = Depends(resolve_authenticated_user),
) -> MoodUpsertResponse:
    entry, created = await storage.upsert_mood_entry(
        user_id=user_id,
        recorded_at=payload.date,
        mood_value=payload.mood_value,
        note=payload.note,
        tags=payload.tags,
    )
    cache.invalidate_user(user_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
    USER_API_COUNTER.labels(endpoint="mood_post").inc()
    return MoodUpsertResponse(id=entry.id, created=created)


@router.get("/mood", response_model=MoodEntryModel | MoodListResponse | None)
async def read_mood_entries(
    storage: StorageService = Depends(get_storage_service),
    user_id: int = Depends(resolve_authenticated_user),
    day: date | None = Query(default=None, alias="date"),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
) -> MoodEntryModel | MoodListResponse | None:
    USER_API_COUNTER.labels(endpoint="mood_get").inc()
    if day is not None:
        entry = await storage.get_mood_entry(user_id, day)
        return MoodEntryModel.from_record(entry) if entry else None
    date_range = _optional_range(start or start_date, end or end_date)
    rows = await storage.list_mood_entries(user_id, date_range)
    return MoodListResponse(items=[MoodEntryModel.from_record(row) for row in rows])


@router.get("/mood/calendar", response_model=MoodCalendarResponse)
async def read_mood_calendar(
    storage: StorageService = Depends(get_storage_service),
    user_id: int = Depends(resolve_authenticated_user),
    month: str | None = Query(default=None),
) -> MoodCalendarResponse:
    month_start = _parse_month(month)
    days = await storage.mood_calendar(user_id, month_start)
    USER_API_COUNTER.labels(endpoint="mood_calendar").inc()
    return MoodCalendarResponse(
        month=month_start.strftime("%Y-%m"),
        days={day.isoformat(): value for day, value in days.items()},
    )


@router.post(
    "/journal",
    response_model=JournalCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_journal_entry(
    payload: JournalCreate,
    storage: StorageService = Depends(get_storage_service),
    user_id: int = Depends(resolve_authenticated_user),
) -> JournalCreateResponse:
    entry = await storage.add_journal_entry(user_id=user_id, content=payload.content)
    USER_API_COUNTER.labels(endpoint="journal_post").inc()
    return JournalCreateResponse(id=entry.id)


@router.get("/journal", response_model=JournalListResponse)
async def list_journal_entries(
    storage: StorageService = Depends(get_storage_service),
    user_id: int = Depends(resolve_authenticated_user),
    day: date | None = Query(default=None, alias="date"),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    limit: int = Query(default=50, ge=1, le=200),
) -> JournalListResponse:
    if day is not None:
        date_range = DateRange(day, day)
    else:
        date_range = _optional_range(start or start_date, end or end_date)
    entries = await storage.list_journal_entries(
        user_id=user_id,
        date_range=date_range,
        limit=limit,
    )
    items = [JournalEntryModel.model_validate(e, from_attributes=True) for e in entries]
    USER_API_COUNTER.labels(endpoint="journal_get").inc()
    return JournalListResponse(items=items)


@router.get(
    "/analytics/snapshot",
    response_model=MoodSnapshotResponse,
)
async def analytics_snapshot(
    engine: MoodInsightsEngine = Depends(get_insights_engine),
    cache: SnapshotCache = Depends(get_snapshot_cache),
    user_id: int = Depends(resolve_authenticated_user),
    reference_date: date | None = Query(default=None, alias="date"),
) -> MoodSnapshotResponse:
    reference = reference_date or date.today()
    USER_API_COUNTER.labels(endpoint="analytics_snapshot").inc()
    cached = cache.get(user_id, reference)
    if cached is not None:
        return MoodSnapshotResponse.from_snapshot(cached, cached=True)
    try:
        snapshot = await engine.snapshot(user_id, reference_date=reference)
    except DataFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="mood data unavailable",
        ) from exc
    cache.set(user_id, snapshot)
    return MoodSnapshotResponse.from_snapshot(snapshot)


@router.get("/me/export")
async def export_me(
    storage: StorageService = Depends(get_storage_service),
    user_id: int = Depends(resolve_authenticated_user),
) -> StreamingResponse:
    content = await storage.export_user_data(user_id)
    USER_API_COUNTER.labels(endpoint="me_export").inc()
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=kokoro-export.csv"},
    )


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    storage: StorageService = Depends(get_storage_service),
    cache: SnapshotCache = Depends(get_snapshot_cache),
    user_id: int = Depends(resolve_authenticated_user),
) -> Response:
    await storage.delete_user(user_id)
    cache.invalidate_user(user_id)
    USER_API_COUNTER.labels(endpoint="me_delete").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
