"""HTTP surface: SSE generation routes, media serving and health check.

Generation is synchronous, so each request runs its pipeline in a worker
thread and relays progress to the event stream through an asyncio.Queue.
"""

import asyncio
import json
import logging
import os
from typing import Callable, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import FileResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from archive_audio.artifacts import resolve_audio_dir
from archive_audio.constants import (
    DEFAULT_HOSTS,
    DEFAULT_INVESTIGATION,
    DEFAULT_INVESTIGATORS,
    DEFAULT_TARGET_SECONDS,
    KEEPALIVE_SECONDS,
    MEDIA_CACHE_CONTROL,
    MEDIA_CONTENT_TYPES,
    MEDIA_URL_PATH,
    VERSION,
)
from archive_audio.models import (
    Article,
    DocumentInput,
    GenerationProgress,
    GenerationResult,
    PodcastRequest,
    ReportRequest,
)
from archive_audio.podcast import generate_podcast
from archive_audio.report import generate_investigative_report

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_DONE = object()


class ReportBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    documents: Optional[list[dict]] = None
    investigation: str = DEFAULT_INVESTIGATION
    selected_investigators: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INVESTIGATORS), alias="selectedInvestigators"
    )
    target_length_seconds: int = Field(default=DEFAULT_TARGET_SECONDS, gt=0, alias="targetLengthSeconds")


class PodcastBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    articles: Optional[list[dict]] = None
    selected_hosts: list[str] = Field(default_factory=lambda: list(DEFAULT_HOSTS), alias="selectedHosts")
    target_length_seconds: int = Field(default=DEFAULT_TARGET_SECONDS, gt=0, alias="targetLengthSeconds")


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def _relay(
    run: Callable[[Callable[[GenerationProgress], None]], GenerationResult],
    progress_event: str,
):
    """Run the pipeline in a thread; yield ("progress", dict) items, then ("result", result).

    Yields ("ping", None) whenever nothing arrives for KEEPALIVE_SECONDS.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_progress(progress: GenerationProgress) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, progress.to_dict())

    future = loop.run_in_executor(None, run, on_progress)
    future.add_done_callback(lambda _: queue.put_nowait(_DONE))

    while True:
        try:
            item = await asyncio.wait_for(queue.get(), KEEPALIVE_SECONDS)
        except asyncio.TimeoutError:
            yield "ping", None
            continue
        if item is _DONE:
            break
        yield progress_event, item

    yield "result", future.result()


async def _generation_stream(
    run,
    start_event: str,
    start_message: str,
    progress_event: str,
    complete_event: str,
    complete_message: str,
    file_key: str,
    failure_message: str,
):
    yield format_sse(start_event, {"message": start_message})
    try:
        async for kind, payload in _relay(run, progress_event):
            if kind == "ping":
                yield format_sse("ping", {"message": "Connection alive"})
            elif kind == "result":
                result: GenerationResult = payload
                if result.success:
                    yield format_sse(complete_event, {
                        "message": complete_message,
                        file_key: result.audio_file,
                        "audioUrl": result.audio_url,
                        "title": result.title,
                        "tags": result.tags,
                    })
                else:
                    yield format_sse("error", {"message": result.error or failure_message})
            else:
                yield format_sse(kind, payload)
    except Exception as e:
        logger.exception("Error in %s stream", start_event)
        yield format_sse("error", {"message": str(e) or "Unknown error occurred"})


async def _single_event(event: str, data: dict):
    yield format_sse(event, data)


def _sse_response(stream) -> StreamingResponse:
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)


def create_app(audio_dir: str | None = None) -> FastAPI:
    """Build the app. audio_dir overrides ARCHIVE_AUDIO_DIR (used by tests)."""
    load_dotenv()
    app = FastAPI(title="archive-audio", version=VERSION)

    @app.post("/api/generate/investigative-report")
    async def investigative_report(body: ReportBody):
        if not body.documents:
            return _sse_response(_single_event("error", {"message": "Documents are required"}))

        request = ReportRequest(
            documents=[DocumentInput.from_dict(d) for d in body.documents],
            investigation=body.investigation,
            selected_investigators=body.selected_investigators,
            target_length_seconds=body.target_length_seconds,
        )
        logger.info("Report requested: %d documents, %ds", len(request.documents), request.target_length_seconds)

        def run(on_progress):
            return generate_investigative_report(request, on_progress=on_progress, audio_dir=audio_dir)

        return _sse_response(_generation_stream(
            run,
            start_event="generatingReport",
            start_message="Starting investigative report generation",
            progress_event="investigationUpdate",
            complete_event="reportComplete",
            complete_message="Investigative report generation complete!",
            file_key="reportFile",
            failure_message="Failed to generate report",
        ))

    @app.post("/api/generate/podcast")
    async def podcast(body: PodcastBody):
        if not body.articles:
            return _sse_response(_single_event("error", {"message": "Articles are required"}))

        request = PodcastRequest(
            articles=[Article.from_dict(a) for a in body.articles],
            selected_hosts=body.selected_hosts,
            target_length_seconds=body.target_length_seconds,
        )
        logger.info("Podcast requested: %d articles, %ds", len(request.articles), request.target_length_seconds)

        def run(on_progress):
            return generate_podcast(request, on_progress=on_progress, audio_dir=audio_dir)

        return _sse_response(_generation_stream(
            run,
            start_event="generatingPodcast",
            start_message="Starting podcast generation",
            progress_event="progress",
            complete_event="podcastComplete",
            complete_message="Podcast generation complete!",
            file_key="podcastFile",
            failure_message="Failed to generate podcast",
        ))

    @app.get(MEDIA_URL_PATH)
    async def media(id: Optional[str] = Query(default=None)):
        if not id:
            raise HTTPException(status_code=400, detail="Missing id parameter")

        root = os.path.realpath(resolve_audio_dir(audio_dir))
        filename = os.path.basename(id)
        path = os.path.realpath(os.path.join(root, filename))

        if not filename or os.path.commonpath([root, path]) != root or path == root:
            raise HTTPException(status_code=403, detail="Invalid path")
        if not os.path.isfile(path):
            raise HTTPException(status_code=404, detail="File not found")

        ext = os.path.splitext(path)[1].lower()
        return FileResponse(
            path,
            media_type=MEDIA_CONTENT_TYPES.get(ext, "application/octet-stream"),
            headers={
                "Cache-Control": MEDIA_CACHE_CONTROL,
                "Accept-Ranges": "bytes",
            },
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": VERSION}

    return app


app = create_app()
