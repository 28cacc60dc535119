"""Test configuration and fixtures for the upload catalog API."""

import json
import os
import tempfile

# main builds a module-level app on import; keep it out of the working tree
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dropfiles-"))

import pytest
from fastapi.testclient import TestClient

from dropfiles.config import Settings
from main import create_app


def sidecar_bytes(upload_id, declared_size, metadata=None, offset=None):
    record = {
        "ID": upload_id,
        "Size": declared_size,
        "SizeIsDeferred": False,
        "Offset": declared_size if offset is None else offset,
        "MetaData": metadata if metadata is not None else {},
        "IsPartial": False,
        "IsFinal": False,
        "PartialUploads": None,
        "Storage": {"Type": "filestore"},
    }
    return json.dumps(record).encode("utf-8")


class MemoryHandle:
    """Reads through to the store so deletes are visible mid-transfer."""

    def __init__(self, store, upload_id):
        self._store = store
        self._upload_id = upload_id
        self._pos = 0
        self.closed = False

    async def seek(self, offset):
        self._pos = offset

    async def read(self, size):
        data = self._store.data.get(self._upload_id, b"")
        chunk = data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk

    async def close(self):
        self.closed = True


class MemoryStore:
    """In-memory stand-in for FilesystemStore."""

    def __init__(self):
        self.sidecars = {}
        self.data = {}
        self.handles = []
        self.data_remove_errors = {}
        self.sidecar_remove_errors = {}
        self.calls = []

    def put(self, upload_id, declared_size, data=b"", metadata=None, offset=None):
        self.sidecars[upload_id] = sidecar_bytes(upload_id, declared_size, metadata, offset)
        if data is not None:
            self.data[upload_id] = data

    async def enumerate_sidecars(self):
        self.calls.append(("enumerate_sidecars",))
        return sorted(self.sidecars)

    async def read_sidecar(self, upload_id):
        self.calls.append(("read_sidecar", upload_id))
        if upload_id not in self.sidecars:
            raise FileNotFoundError(upload_id)
        return self.sidecars[upload_id]

    async def stat_data_file(self, upload_id):
        self.calls.append(("stat_data_file", upload_id))
        if upload_id not in self.data:
            raise FileNotFoundError(upload_id)
        return len(self.data[upload_id])

    async def open_data_file(self, upload_id):
        self.calls.append(("open_data_file", upload_id))
        if upload_id not in self.data:
            raise FileNotFoundError(upload_id)
        handle = MemoryHandle(self, upload_id)
        self.handles.append(handle)
        return handle, len(self.data[upload_id])

    async def remove_data_file(self, upload_id):
        self.calls.append(("remove_data_file", upload_id))
        if upload_id in self.data_remove_errors:
            raise self.data_remove_errors[upload_id]
        if upload_id not in self.data:
            raise FileNotFoundError(upload_id)
        del self.data[upload_id]

    async def remove_sidecar(self, upload_id):
        self.calls.append(("remove_sidecar", upload_id))
        if upload_id in self.sidecar_remove_errors:
            raise self.sidecar_remove_errors[upload_id]
        if upload_id not in self.sidecars:
            raise FileNotFoundError(upload_id)
        del self.sidecars[upload_id]


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def upload_dir(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def make_upload(upload_dir):
    """Write a data file and its sidecar the way the upload server does."""

    def _make(upload_id, declared_size, data=b"", metadata=None, offset=None):
        (upload_dir / upload_id).write_bytes(data)
        (upload_dir / f"{upload_id}.info").write_bytes(
            sidecar_bytes(upload_id, declared_size, metadata, offset)
        )
        return upload_dir / upload_id

    return _make


@pytest.fixture
def settings(upload_dir):
    return Settings(upload_dir=str(upload_dir), stream_chunk_size=4, auth_enabled=False)


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
