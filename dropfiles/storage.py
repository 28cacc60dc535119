# Each upload is a pair in one flat directory: {id} (data) and {id}.info (sidecar)

import errno
import os
import stat
from typing import Any, List, Protocol, Tuple

import aiofiles
import aiofiles.os

from dropfiles.errors import InvalidIdentifierError, MissingIdentifierError

SIDECAR_SUFFIX = ".info"


def validate_upload_id(upload_id: str) -> str:
    """Reject identifiers that could address anything but an upload pair."""
    if not upload_id:
        raise MissingIdentifierError()
    if (
        "/" in upload_id
        or "\\" in upload_id
        or ".." in upload_id
        or "\x00" in upload_id
        or upload_id.endswith(SIDECAR_SUFFIX)
    ):
        raise InvalidIdentifierError("Invalid file ID", upload_id)
    return upload_id


class UploadStore(Protocol):
    async def enumerate_sidecars(self) -> List[str]:
        """Return the ids of all sidecars, sorted, without duplicates."""
        ...

    async def read_sidecar(self, upload_id: str) -> bytes:
        ...

    async def stat_data_file(self, upload_id: str) -> int:
        """Return the live byte length of the data file."""
        ...

    async def open_data_file(self, upload_id: str) -> Tuple[Any, int]:
        """Return ``(handle, size)``, size taken from the opened handle."""
        ...

    async def remove_data_file(self, upload_id: str) -> None:
        ...

    async def remove_sidecar(self, upload_id: str) -> None:
        ...


class FilesystemStore:
    def __init__(self, root: str):
        self.root = root

    def data_path(self, upload_id: str) -> str:
        return os.path.join(self.root, upload_id)

    def sidecar_path(self, upload_id: str) -> str:
        return os.path.join(self.root, upload_id + SIDECAR_SUFFIX)

    async def enumerate_sidecars(self) -> List[str]:
        names = await aiofiles.os.listdir(self.root)
        return sorted(
            name[: -len(SIDECAR_SUFFIX)]
            for name in set(names)
            if name.endswith(SIDECAR_SUFFIX) and len(name) > len(SIDECAR_SUFFIX)
        )

    async def read_sidecar(self, upload_id: str) -> bytes:
        async with aiofiles.open(self.sidecar_path(upload_id), "rb") as f:
            return await f.read()

    async def stat_data_file(self, upload_id: str) -> int:
        path = self.data_path(upload_id)
        st = await aiofiles.os.stat(path)
        if not stat.S_ISREG(st.st_mode):
            raise FileNotFoundError(errno.ENOENT, "Not a data file", path)
        return st.st_size

    async def open_data_file(self, upload_id: str) -> Tuple[Any, int]:
        path = self.data_path(upload_id)
        handle = await aiofiles.open(path, "rb")
        try:
            st = os.fstat(handle.fileno())
            if not stat.S_ISREG(st.st_mode):
                raise FileNotFoundError(errno.ENOENT, "Not a data file", path)
        except BaseException:
            await handle.close()
            raise
        return handle, st.st_size

    async def remove_data_file(self, upload_id: str) -> None:
        await aiofiles.os.remove(self.data_path(upload_id))

    async def remove_sidecar(self, upload_id: str) -> None:
        await aiofiles.os.remove(self.sidecar_path(upload_id))
