# Serves and deletes completed uploads; a delete racing a transfer may cut it short

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional, Tuple
from urllib.parse import quote

from dropfiles.errors import (
    IncompleteUploadError,
    PartialDeleteError,
    RangeNotSatisfiableError,
    TruncatedTransferError,
    UploadIOError,
    UploadNotFoundError,
)
from dropfiles.models import RangeStatus, UploadRecord
from dropfiles.ranges import resolve_range
from dropfiles.records import is_complete, read_record
from dropfiles.storage import UploadStore, validate_upload_id

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


def content_disposition(disposition: str, filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


class ServedContent:
    """Status, headers and body iterator of a response about to be sent."""

    def __init__(self, status_code: int, headers: Dict[str, str], body: AsyncIterator[bytes]):
        self.status_code = status_code
        self.headers = headers
        self.body = body


class ContentServer:
    def __init__(self, store: UploadStore, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.store = store
        self.chunk_size = chunk_size

    async def download(self, upload_id: str) -> ServedContent:
        record, handle, size = await self._open_complete(upload_id)
        headers = {
            "Content-Disposition": content_disposition(
                "attachment", record.metadata.resolved_filename(upload_id)
            ),
            "Content-Type": record.metadata.resolved_filetype(),
            "Content-Length": str(size),
        }
        return ServedContent(200, headers, self._transfer(upload_id, handle, 0, size))

    async def stream(self, upload_id: str, range_header: Optional[str] = None) -> ServedContent:
        record, handle, size = await self._open_complete(upload_id)
        plan = resolve_range(range_header, size)
        if plan.status == RangeStatus.UNSATISFIABLE:
            await handle.close()
            raise RangeNotSatisfiableError(size, upload_id)

        headers = {
            "Content-Type": record.metadata.resolved_filetype(),
            "Accept-Ranges": "bytes",
            "Content-Disposition": content_disposition(
                "inline", record.metadata.resolved_filename(upload_id)
            ),
            "Content-Length": str(plan.length),
        }
        status_code = 200
        if plan.status == RangeStatus.PARTIAL:
            headers["Content-Range"] = plan.content_range
            status_code = 206
        return ServedContent(
            status_code, headers, self._transfer(upload_id, handle, plan.start, plan.length)
        )

    async def delete(self, upload_id: str) -> None:
        # Data first: a sidecar without data is filtered out of listings,
        # data without a sidecar would never be reclaimed.
        validate_upload_id(upload_id)
        try:
            await self.store.remove_data_file(upload_id)
        except FileNotFoundError:
            raise UploadNotFoundError("File not found", upload_id)
        except OSError as exc:
            logger.error("Failed to delete data file of %s: %s", upload_id, exc)
            raise UploadIOError("Failed to delete file", upload_id) from exc

        try:
            await self.store.remove_sidecar(upload_id)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("Deleted data of %s but not its sidecar: %s", upload_id, exc)
            raise PartialDeleteError("File deleted, metadata removal failed", upload_id) from exc

        logger.info("Deleted upload %s", upload_id)

    async def _open_complete(self, upload_id: str) -> Tuple[UploadRecord, Any, int]:
        validate_upload_id(upload_id)
        record = await read_record(self.store, upload_id)
        try:
            handle, size = await self.store.open_data_file(upload_id)
        except (FileNotFoundError, IsADirectoryError):
            raise UploadNotFoundError("File not found", upload_id)
        except OSError as exc:
            raise UploadIOError("Failed to open file", upload_id) from exc

        if not is_complete(record, size):
            await handle.close()
            raise IncompleteUploadError("File upload not complete", upload_id)
        return record, handle, size

    async def _transfer(self, upload_id: str, handle, start: int, length: int) -> AsyncIterator[bytes]:
        transferred = 0
        try:
            if start:
                await handle.seek(start)
            while transferred < length:
                chunk = await handle.read(min(self.chunk_size, length - transferred))
                if not chunk:
                    raise TruncatedTransferError(upload_id, length, transferred)
                transferred += len(chunk)
                yield chunk
        except (asyncio.CancelledError, GeneratorExit):
            logger.warning(
                "Transfer of %s abandoned after %d of %d bytes", upload_id, transferred, length
            )
            raise
        except TruncatedTransferError as exc:
            logger.warning("Transfer of %s cut short: %s", upload_id, exc)
            raise
        except OSError as exc:
            logger.warning("Transfer of %s failed after %d bytes: %s", upload_id, transferred, exc)
            raise UploadIOError("Failed to read file", upload_id) from exc
        finally:
            await handle.close()
