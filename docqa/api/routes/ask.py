"""
docqa/api/routes/ask.py

Document question endpoint.

POST /ask
    Accept a multipart form (question, markdownFile, optional model),
    buffer the upload in memory, run the ask pipeline, and return
    ``{"answer": ...}``.  Every failure is raised as a DocQAError and
    rendered by the application's exception handler as ``{"error": ...}``
    with 400 (client fault) or 500 (server fault).
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from docqa.api.routes import get_pipeline
from docqa.models.schemas import AskResponse, ErrorResponse
from docqa.models.submission import Submission, UploadedDocument
from docqa.pipeline.orchestrator import AskPipeline

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _read_upload(upload: UploadFile | None) -> UploadedDocument | None:
    """Materialise the whole upload into memory."""
    if upload is None:
        return None
    contents = await upload.read()
    return UploadedDocument(
        filename=upload.filename or "upload",
        media_type=upload.content_type,
        content=contents,
    )


@router.post(
    "/ask",
    response_model=AskResponse,
    status_code=status.HTTP_200_OK,
    summary="Ask a question about an uploaded document",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def ask(
    question: str | None = Form(default=None),
    markdown_file: UploadFile | None = File(default=None, alias="markdownFile"),
    model: str | None = Form(default=None),
    pipeline: AskPipeline = Depends(get_pipeline),
) -> AskResponse:
    """Answer *question* using only the content of the uploaded document.

    Accepted document types: ``text/markdown`` and ``text/plain`` (as
    declared by the client).  The whole document is sent to the model.
    """
    document = await _read_upload(markdown_file)
    result = await pipeline.run(
        Submission(question=question, document=document, model=model)
    )
    return AskResponse(answer=result.answer)
