# app/services/imports.py
import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PortalError
from app.schemas.user import UserCreate
from app.services import users as directory

logger = logging.getLogger(__name__)

# Raised by openpyxl and csv on corrupt or mis-encoded uploads
UNREADABLE_FILE_ERRORS = (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError, csv.Error)

# Spreadsheet header -> UserCreate field
HEADER_ALIASES = {
    "name": "name",
    "email": "email",
    "role": "role",
    "managers": "managers",
    "teamleads": "team_leads",
    "team_leads": "team_leads",
    "team leads": "team_leads",
}


@dataclass
class ImportResult:
    success: int = 0
    errors: List[str] = field(default_factory=list)


def _normalise_row(raw: Dict[Any, Any]) -> Dict[str, Any]:
    row = {}
    for key, value in raw.items():
        if key is None:
            continue
        name = HEADER_ALIASES.get(str(key).strip().lower())
        if name:
            row[name] = value.strip() if isinstance(value, str) else value
    return row


def _read_xlsx(content: bytes) -> List[Dict[str, Any]]:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []
        parsed = []
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            parsed.append(_normalise_row(dict(zip(header, values))))
        return parsed
    finally:
        workbook.close()


def _read_csv(content: bytes) -> List[Dict[str, Any]]:
    reader = csv.DictReader(io.StringIO(content.decode("utf-8-sig")))
    return [_normalise_row(raw) for raw in reader if any(isinstance(v, str) and v.strip() for v in raw.values())]


def parse_user_rows(filename: str, content: bytes) -> List[Dict[str, Any]]:
    """Rows of the first sheet of an .xlsx workbook, or of a .csv file."""
    lowered = (filename or "").lower()
    if lowered.endswith(".xlsx"):
        return _read_xlsx(content)
    if lowered.endswith(".csv"):
        return _read_csv(content)
    raise ValueError("Unsupported file type; upload an .xlsx or .csv file")


def _split_uids(value: Any) -> List[str]:
    if not value:
        return []
    return [uid.strip() for uid in str(value).split(",") if uid.strip()]


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


async def import_users(db: AsyncSession, rows: Iterable[Dict[str, Any]]) -> ImportResult:
    """Create one user per row. A failing row is reported and the batch continues."""
    result = ImportResult()
    for row in rows:
        email = row.get("email") or ""
        try:
            data = UserCreate(
                name=str(row.get("name") or "").strip(),
                email=str(email).strip(),
                role=str(row.get("role") or "").strip().lower(),
                managers=_split_uids(row.get("managers")),
                team_leads=_split_uids(row.get("team_leads")),
            )
            await directory.create_user(db, data)
            result.success += 1
        except ValidationError as e:
            result.errors.append(f"Error adding {email}: {_describe(e)}")
        except PortalError as e:
            result.errors.append(f"Error adding {email}: {e.detail}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Database error importing %s", email)
            result.errors.append(f"Error adding {email}: {e.__class__.__name__}")

    logger.info("User import finished: %d created, %d failed", result.success, len(result.errors))
    return result
