from fastapi import APIRouter, Depends

from timegrid.api.deps import get_timetable_service
from timegrid.schemas.time_grid import TimeSlot, TimeSlotConfig
from timegrid.schemas.timetable import GenerateTimetableRequest, GenerateTimetableResponse
from timegrid.services.timetable_service import TimetableService

router = APIRouter()


@router.post("/time-grid/preview", response_model=list[TimeSlot])
def preview_time_grid(
    config: TimeSlotConfig,
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimeSlot]:
    return service.preview_slots(config)


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    request: GenerateTimetableRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> GenerateTimetableResponse:
    return service.generate(request)
