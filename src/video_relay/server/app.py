"""FastAPI application exposing Extract and Download."""

import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from ..classifier import StrategyId
from ..config import AppConfig
from ..errors import InputError, VideoRelayError
from ..extractor import VideoRecord, list_supported_platforms
from ..pipeline import ExtractionPipeline
from ..relay import RelaySession, TempStorage


logger = logging.getLogger(__name__)


class ExtractRequest(BaseModel):
    """Request body for extraction."""
    url: Optional[str] = None


class FormatInfo(BaseModel):
    quality: str
    mimeType: str
    itag: Optional[str] = None


class VideoSourceInfo(BaseModel):
    url: str
    type: str
    quality: str


class VideoInfoResponse(BaseModel):
    """Flat VideoRecord as returned to clients."""

    title: str
    platform: str
    thumbnail: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    duration: Optional[int] = None
    videoUrl: Optional[str] = None

    # Only one of these is set, depending on the strategy
    formats: Optional[list[FormatInfo]] = None
    videoSources: Optional[list[VideoSourceInfo]] = None

    @classmethod
    def from_record(cls, record: VideoRecord) -> "VideoInfoResponse":
        fields = dict(
            title=record.title,
            platform=record.platform,
            thumbnail=record.thumbnail_url,
            description=record.description,
            author=record.author,
            duration=record.duration_seconds,
            videoUrl=record.primary_media_url,
        )
        if record.platform == StrategyId.YOUTUBE.value:
            fields["formats"] = [
                FormatInfo(quality=s.quality_label, mimeType=s.mime_type, itag=s.format_id)
                for s in record.candidate_media_sources
            ]
        elif record.candidate_media_sources:
            fields["videoSources"] = [
                VideoSourceInfo(url=s.url, type=s.mime_type, quality=s.quality_label)
                for s in record.candidate_media_sources
            ]
        return cls(**fields)


class RelayResponse(StreamingResponse):
    """Streams an opened RelaySession and always closes it afterwards."""

    def __init__(self, session: RelaySession, filename: str):
        super().__init__(
            session.iter_chunks(),
            media_type="video/mp4",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
        self.session = session

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            # Client disconnects leave the body iterator suspended
            await self.session.close()


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application settings (defaults when omitted)

    Returns:
        Configured FastAPI app
    """
    config = config or AppConfig()

    app = FastAPI(
        title="Video Relay",
        description="Extract video metadata from media pages and relay the media",
        version="0.1.0",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Initialize components
    storage = TempStorage(config.temp_dir)
    storage.ensure()
    pipeline = ExtractionPipeline(
        timeout=config.extractor.timeout,
        user_agent=config.extractor.user_agent,
    )

    app.state.config = config
    app.state.storage = storage
    app.state.pipeline = pipeline

    # ==================== ERROR HANDLERS ====================

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies or a non-string url never reach the validator
        return JSONResponse(status_code=400, content={"message": "Invalid URL format"})

    @app.exception_handler(VideoRelayError)
    async def relay_error_handler(request: Request, exc: VideoRelayError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"message": str(exc)})

    # ==================== API ====================

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/platforms")
    async def platforms():
        """Platforms with a dedicated extractor."""
        return {"platforms": list_supported_platforms()}

    @app.post("/api/extract", response_model=VideoInfoResponse, response_model_exclude_unset=True)
    async def extract(
        body: Optional[ExtractRequest] = None,
        url: Optional[str] = Query(None),
    ):
        """Extract video information from a URL."""
        target = (body.url if body and body.url else None) or url
        record = await app.state.pipeline.extract(target)
        return VideoInfoResponse.from_record(record)

    @app.get("/api/download")
    async def download(url: Optional[str] = Query(None)):
        """Relay the media behind a page URL as an attachment."""
        plan = await app.state.pipeline.resolve_download(url)

        relay_config = app.state.config.relay
        session = RelaySession(
            plan.locator,
            referer=plan.referer,
            user_agent=app.state.config.extractor.user_agent,
            chunk_size=relay_config.chunk_size,
            connect_timeout=relay_config.connect_timeout,
            read_timeout=relay_config.read_timeout,
        )
        # Errors here still become a JSON 500: nothing has been sent yet
        await session.open()

        logger.info("Relaying %s as %s", plan.locator, plan.filename)
        return RelayResponse(session, plan.filename)

    return app


def run_server(
    config: Optional[AppConfig] = None,
    debug: bool = False,
):
    """
    Run the API server.

    Args:
        config: Application settings
        debug: Enable auto-reload
    """
    import uvicorn

    config = config or AppConfig()
    app = create_app(config)
    uvicorn.run(app, host=config.server.host, port=config.server.port, reload=debug)
