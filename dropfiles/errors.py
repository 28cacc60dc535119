# Errors carry the HTTP status and the code returned to clients

from typing import Optional


class UploadError(Exception):
    status_code = 500
    code = "IOError"

    def __init__(self, detail: str, upload_id: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.upload_id = upload_id

    def to_payload(self) -> dict:
        return {"error": self.code, "detail": self.detail}


class MissingIdentifierError(UploadError):
    status_code = 400
    code = "MissingIdentifier"

    def __init__(self):
        super().__init__("File ID required")


class InvalidIdentifierError(UploadError):
    status_code = 400
    code = "InvalidIdentifier"


class UploadNotFoundError(UploadError):
    status_code = 404
    code = "NotFound"


class MalformedRecordError(UploadNotFoundError):
    """Sidecar exists but cannot be parsed into an upload record."""

    code = "Malformed"


class IncompleteUploadError(UploadError):
    status_code = 400
    code = "Incomplete"


class RangeNotSatisfiableError(UploadError):
    status_code = 416
    code = "Unsatisfiable"

    def __init__(self, total_length: int, upload_id: Optional[str] = None):
        super().__init__("Range not satisfiable", upload_id)
        self.total_length = total_length

    @property
    def content_range(self) -> str:
        return f"bytes */{self.total_length}"

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["total_length"] = self.total_length
        return payload


class UploadIOError(UploadError):
    status_code = 500
    code = "IOError"


class TruncatedTransferError(UploadIOError):
    """Data file ended before the planned byte window was transferred."""

    def __init__(self, upload_id: str, expected: int, transferred: int):
        super().__init__(
            f"Short read: transferred {transferred} of {expected} bytes", upload_id
        )
        self.expected = expected
        self.transferred = transferred


class PartialDeleteError(UploadError):
    status_code = 500
    code = "PartialFailure"
