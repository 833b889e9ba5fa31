"""Report drift between saved timetables and their session index rows.

Run:
  PYTHONPATH=backend python check_session_index.py [--institute ID] [--repair]
"""

import argparse

from sqlalchemy import func, select

from timegrid.core.config import get_settings
from timegrid.db.session import SessionLocal
from timegrid.models.session_index import SessionIndexRow
from timegrid.services.catalog import active_timetables
from timegrid.services.timetable_service import TimetableService

parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
parser.add_argument("--institute", default=get_settings().default_institute_id)
parser.add_argument("--repair", action="store_true", help="rebuild the index when drift is found")
args = parser.parse_args()

db = SessionLocal()
try:
    drifted = 0
    records = active_timetables(db, args.institute)
    print(f"Active timetables for {args.institute}: {len(records)}")
    for record in records:
        expected = len(record.entries or [])
        indexed = db.execute(
            select(func.count(SessionIndexRow.id)).where(SessionIndexRow.timetable_id == record.id)
        ).scalar_one()
        if indexed != expected:
            drifted += 1
        marker = "ok" if indexed == expected else "DRIFT"
        print(f"  - {record.class_name} sem {record.semester} ({record.id}): {indexed}/{expected} rows [{marker}]")

    if drifted and args.repair:
        result = TimetableService(db, args.institute).reindex()
        print(f"Reindexed {result.timetables} timetables: {result.written} rows written, {result.failed} failed")
    elif drifted:
        print(f"{drifted} timetable(s) drifted; rerun with --repair to rebuild the index")
finally:
    db.close()
