from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from dropfiles.config import Settings
from dropfiles.errors import RangeNotSatisfiableError, UploadError
from dropfiles.file_handlers import router as files_router
from dropfiles.service import ContentServer
from dropfiles.storage import FilesystemStore
import logging
import os
import uvicorn

logger = logging.getLogger("dropfiles")


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or Settings()
    upload_root = settings.upload_root
    os.makedirs(upload_root, exist_ok=True)

    app = FastAPI(title="Drop Files API")
    app.state.settings = settings
    app.state.content_server = ContentServer(
        FilesystemStore(upload_root), chunk_size=settings.STREAM_CHUNK_SIZE
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["GET", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Range", "Accept-Ranges", "Content-Disposition"],
    )

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        headers = {}
        if isinstance(exc, RangeNotSatisfiableError):
            headers["Content-Range"] = exc.content_range
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)

    app.include_router(files_router, prefix="/api")

    # Liveness probe
    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        return "OK"

    logger.info("Upload directory: %s", upload_root)
    return app


settings = Settings()
configure_logging(settings.LOG_LEVEL)
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
