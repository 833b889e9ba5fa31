from fastapi import APIRouter, Depends

from timegrid.api.deps import get_timetable_service
from timegrid.schemas.conflict import (
    ConflictDetectRequest,
    ConflictProbe,
    ConflictReport,
    ReindexResult,
    SessionIndexEntry,
)
from timegrid.schemas.timetable import ConflictSummary
from timegrid.services.timetable_service import TimetableService

router = APIRouter()


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(
    payload: ConflictDetectRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> ConflictReport:
    conflicts = service.analyze(
        payload.entries,
        include_history=payload.include_history,
        exclude_timetable_id=payload.exclude_timetable_id,
    )
    return ConflictReport(conflicts=conflicts, summary=ConflictSummary.from_conflicts(conflicts))


@router.post("/probe", response_model=list[SessionIndexEntry])
def probe_session_index(
    probe: ConflictProbe,
    service: TimetableService = Depends(get_timetable_service),
) -> list[SessionIndexEntry]:
    # the X-Institute-Id scope always wins over a body instituteId
    scoped = probe.model_copy(update={"institute_id": service.institute_id})
    return service.index.find_conflicting(scoped)


@router.post("/reindex", response_model=ReindexResult)
def reindex_sessions(
    service: TimetableService = Depends(get_timetable_service),
) -> ReindexResult:
    return service.reindex()
