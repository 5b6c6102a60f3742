"""Data export and reset."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from dentaldesk.database import MockDatabase
from dentaldesk.exceptions import StorageError
from dentaldesk.storage import INCIDENTS_KEY, PATIENTS_KEY, USER_KEY, KeyValueStore
from dentaldesk.types import DataBackup

_LOGGER = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


async def export_backup(
    database: MockDatabase, now: datetime | None = None
) -> DataBackup:
    patients = await database.get_patients()
    incidents = await database.get_incidents()
    export_date = (now or datetime.now(timezone.utc)).isoformat()
    return DataBackup(
        patients=patients,
        incidents=incidents,
        export_date=export_date,
        version=BACKUP_VERSION,
    )


def backup_filename(backup: DataBackup) -> str:
    """``dental-backup-YYYY-MM-DD.json`` from the export date."""
    return f"dental-backup-{backup.export_date[:10]}.json"


def write_backup(backup: DataBackup, path: Path | str) -> Path:
    """Write the backup as indented JSON; a directory gets the default filename."""
    path = Path(path)
    if path.is_dir():
        path = path / backup_filename(backup)
    try:
        path.write_text(backup.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot write backup to {path}: {e}") from e
    _LOGGER.info(
        "Exported %d patients and %d incidents to %s",
        len(backup.patients),
        len(backup.incidents),
        path,
    )
    return path


def clear_all_data(store: KeyValueStore) -> None:
    """Remove every dentaldesk key, signing the user out as well."""
    for key in (PATIENTS_KEY, INCIDENTS_KEY, USER_KEY):
        store.remove_item(key)
    _LOGGER.info("Cleared all stored data")
