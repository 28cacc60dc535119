from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse

from dropfiles.auth import require_token
from dropfiles.catalog import list_uploads
from dropfiles.service import ContentServer, ServedContent

router = APIRouter(dependencies=[Depends(require_token)])


def get_content_server(request: Request) -> ContentServer:
    return request.app.state.content_server


def _respond(content: ServedContent) -> StreamingResponse:
    # Content-Type travels in the headers so no charset gets appended
    return StreamingResponse(content.body, status_code=content.status_code, headers=content.headers)


@router.get("/files")
async def list_files(server: ContentServer = Depends(get_content_server)):
    uploads = await list_uploads(server.store)
    return [upload.to_listing() for upload in uploads]


# ":path" lets empty ids and ids with "/" reach validate_upload_id
@router.get("/files/{file_id:path}")
async def download_file(file_id: str, server: ContentServer = Depends(get_content_server)):
    return _respond(await server.download(file_id))


@router.delete("/files/{file_id:path}", status_code=204)
async def delete_file(file_id: str, server: ContentServer = Depends(get_content_server)):
    await server.delete(file_id)
    return Response(status_code=204)


@router.get("/stream/{file_id:path}")
async def stream_file(
    file_id: str, request: Request, server: ContentServer = Depends(get_content_server)
):
    range_header = request.headers.get("range")
    return _respond(await server.stream(file_id, range_header))
