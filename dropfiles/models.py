from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

DEFAULT_MIME_TYPE = "application/octet-stream"


class UploadMetadata(BaseModel):
    """Free-form metadata attached by the uploading client.

    Recognized keys are ``filename``, ``filetype`` and ``relativePath``; any
    other key is kept but never consulted. Every value must be a string.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    filename: str = ""
    filetype: str = ""
    relative_path: str = Field("", alias="relativePath")

    @model_validator(mode="before")
    @classmethod
    def _string_mapping(cls, data: Any) -> Any:
        # tus stores a nil map as JSON null
        if data is None:
            return {}
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValueError("metadata must be an object")
        for key, value in data.items():
            if not isinstance(value, str):
                raise ValueError(f"metadata value for {key!r} must be a string")
        return data

    def resolved_filename(self, upload_id: str) -> str:
        return self.filename or upload_id

    def resolved_filetype(self) -> str:
        # ends up verbatim in Content-Type, so it must be a printable ASCII token
        filetype = self.filetype.strip()
        if not filetype or not (filetype.isascii() and filetype.isprintable()):
            return DEFAULT_MIME_TYPE
        return filetype


class UploadRecord(BaseModel):
    """Sidecar ``{id}.info`` record written by the upload server."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: StrictStr = Field(alias="ID")
    declared_size: StrictInt = Field(alias="Size", ge=0)
    # advisory only, may lag behind the data file
    bytes_written: StrictInt = Field(0, alias="Offset", ge=0)
    metadata: UploadMetadata = Field(default_factory=UploadMetadata, alias="MetaData")


class UploadSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    size: int
    mime_type: str = Field(alias="mimeType")
    relative_path: str = Field("", alias="path")
    completed: bool

    def to_listing(self) -> dict:
        # "path" is left out when the upload was not part of a folder
        return self.model_dump(by_alias=True, exclude_defaults=True)


class RangeStatus(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    UNSATISFIABLE = "unsatisfiable"


class ServingPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: RangeStatus
    start: int = 0
    end: int = -1
    total_length: int

    @property
    def length(self) -> int:
        if self.status == RangeStatus.UNSATISFIABLE:
            return 0
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        if self.status == RangeStatus.UNSATISFIABLE:
            return f"bytes */{self.total_length}"
        return f"bytes {self.start}-{self.end}/{self.total_length}"
