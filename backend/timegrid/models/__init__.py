from timegrid.models.course import Course, SessionType  # noqa: F401
from timegrid.models.faculty import Faculty  # noqa: F401
from timegrid.models.room import Room  # noqa: F401
from timegrid.models.session_index import SessionIndexRow  # noqa: F401
from timegrid.models.timetable import Timetable  # noqa: F401
