from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError

from timegrid.core.config import Settings, get_settings
from timegrid.core.exceptions import ConfigurationError
from timegrid.db.bootstrap import REQUIRED_COLUMNS
from timegrid.db.session import engine
from timegrid.models.session_index import SessionIndexRow
from timegrid.schemas.time_grid import TimeSlotConfig
from timegrid.services.time_grid import build_slots

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_database() -> dict:
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    index_rows: int | None = None
    try:
        with engine.connect() as connection:
            inspector = inspect(connection)
            table_names = set(inspector.get_table_names())
            for table_name, columns in REQUIRED_COLUMNS.items():
                if table_name not in table_names:
                    missing_tables.append(table_name)
                    continue
                existing = {item["name"] for item in inspector.get_columns(table_name)}
                missing = sorted(columns - existing)
                if missing:
                    missing_columns[table_name] = missing
            if SessionIndexRow.__tablename__ in table_names:
                index_rows = connection.execute(select(func.count()).select_from(SessionIndexRow)).scalar_one()
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        return {"ok": False, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": str(exc)}

    return {
        "ok": True,
        "schema_ok": not missing_tables and not missing_columns,
        "missing_tables": missing_tables,
        "missing_columns": missing_columns,
        "session_index_rows": index_rows,
        "error": None,
    }


def _check_default_day(settings: Settings) -> dict:
    try:
        slots = build_slots(TimeSlotConfig.from_settings(settings))
    except ConfigurationError as exc:
        return {"ok": False, "slots": 0, "error": exc.message, "field": exc.details.get("field")}
    return {"ok": bool(slots), "slots": len(slots), "error": None if slots else "default day has no bookable slots"}


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready(settings: Settings = Depends(get_settings)) -> JSONResponse:
    database = _check_database()
    default_day = _check_default_day(settings)
    ready = database["ok"] and database["schema_ok"] and default_day["ok"]

    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _now(),
        "database": database,
        "default_day": default_day,
        "conflict_lookup": settings.conflict_lookup,
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
