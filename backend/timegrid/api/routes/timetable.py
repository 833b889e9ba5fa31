from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from timegrid.api.deps import get_timetable_service
from timegrid.schemas.timetable import TimetableCreate, TimetableCreated, TimetableEntriesUpdate, TimetableOut
from timegrid.schemas.workload import FacultyWorkloadOut
from timegrid.services.timetable_service import TimetableService

router = APIRouter()


@router.post("", response_model=TimetableCreated, status_code=status.HTTP_201_CREATED)
def accept_timetable(
    payload: TimetableCreate,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableCreated:
    return TimetableCreated(id=service.accept(payload))


@router.get("", response_model=list[TimetableOut])
def list_timetables(
    class_name: str | None = Query(default=None, alias="class"),
    semester: str | None = None,
    include_superseded: bool = Query(default=False, alias="includeSuperseded"),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableOut]:
    records = service.list_timetables(
        class_name=class_name,
        semester=semester,
        include_superseded=include_superseded,
    )
    return [TimetableOut.model_validate(record) for record in records]


@router.get("/latest", response_model=TimetableOut)
def latest_timetable(
    class_name: str = Query(alias="class", min_length=1),
    semester: str = Query(min_length=1),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    record = service.latest_for_class(class_name, semester)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No timetable for this class")
    return TimetableOut.model_validate(record)


@router.get("/{timetable_id}", response_model=TimetableOut)
def get_timetable(
    timetable_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return TimetableOut.model_validate(service.get(timetable_id))


@router.put("/{timetable_id}/entries", status_code=status.HTTP_204_NO_CONTENT)
def update_timetable_entries(
    timetable_id: str,
    payload: TimetableEntriesUpdate,
    service: TimetableService = Depends(get_timetable_service),
) -> Response:
    service.update(timetable_id, payload.entries)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{timetable_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_timetable(
    timetable_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> Response:
    service.discard(timetable_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{timetable_id}/workload/{faculty_id}", response_model=FacultyWorkloadOut)
def faculty_workload(
    timetable_id: str,
    faculty_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> FacultyWorkloadOut:
    return service.workload(timetable_id, faculty_id)
