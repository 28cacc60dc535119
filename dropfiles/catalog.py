import logging
from typing import List

from dropfiles.errors import UploadError, UploadIOError
from dropfiles.models import UploadSummary
from dropfiles.records import is_complete, read_record
from dropfiles.storage import UploadStore

logger = logging.getLogger(__name__)


async def list_uploads(store: UploadStore) -> List[UploadSummary]:
    """Return a summary of every upload whose data file is complete.

    Uploads still in progress, orphaned sidecars and corrupt records are
    skipped so that one bad entry never hides the others.
    """
    try:
        upload_ids = await store.enumerate_sidecars()
    except OSError as exc:
        raise UploadIOError("Failed to read directory") from exc

    summaries = []
    for upload_id in upload_ids:
        try:
            record = await read_record(store, upload_id)
        except UploadError as exc:
            logger.debug("Skipping %s: %s", upload_id, exc.code)
            continue

        try:
            actual_size = await store.stat_data_file(upload_id)
        except OSError:
            logger.debug("Skipping %s: data file missing", upload_id)
            continue

        if not is_complete(record, actual_size):
            logger.debug(
                "Skipping %s: %d of %d bytes", upload_id, actual_size, record.declared_size
            )
            continue

        summaries.append(
            UploadSummary(
                id=upload_id,
                name=record.metadata.resolved_filename(upload_id),
                size=actual_size,
                mime_type=record.metadata.resolved_filetype(),
                relative_path=record.metadata.relative_path,
                completed=True,
            )
        )
    return summaries
