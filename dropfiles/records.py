import logging

from pydantic import ValidationError

from dropfiles.errors import MalformedRecordError, UploadNotFoundError
from dropfiles.models import UploadRecord
from dropfiles.storage import UploadStore

logger = logging.getLogger(__name__)


async def read_record(store: UploadStore, upload_id: str) -> UploadRecord:
    """Load and parse the sidecar of ``upload_id``.

    Raises UploadNotFoundError when the sidecar cannot be read and
    MalformedRecordError when it is not a valid upload record.
    """
    try:
        raw = await store.read_sidecar(upload_id)
    except FileNotFoundError:
        raise UploadNotFoundError("File not found", upload_id)
    except OSError as exc:
        logger.warning("Unreadable sidecar for %s: %s", upload_id, exc)
        raise UploadNotFoundError("File not found", upload_id) from exc

    try:
        return UploadRecord.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedRecordError("Malformed upload record", upload_id) from exc


def is_complete(record: UploadRecord, actual_size: int) -> bool:
    # bytes_written is advisory, only the live size counts
    return actual_size == record.declared_size
