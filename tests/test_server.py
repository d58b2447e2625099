"""Tests for the HTTP API."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from video_relay.config import AppConfig, StorageConfig
from video_relay.errors import ExtractionError, LocatorNotFoundError, RelayError
from video_relay.extractor import MediaSource, VideoRecord
from video_relay.pipeline import DownloadPlan
from video_relay.relay import RelaySession
from video_relay.server import RelayResponse, create_app


def generic_record(media_url="https://example.com/a.mp4"):
    sources = (MediaSource(url=media_url, mime_type="video/mp4", quality_label="unknown"),)
    return VideoRecord(
        title="Clip",
        platform="example.com",
        source_url="https://example.com/clip",
        primary_media_url=media_url,
        candidate_media_sources=sources,
    )


@pytest.fixture
def app(tmp_path):
    config = AppConfig(storage=StorageConfig(temp_dir=str(tmp_path / "temp")))
    return create_app(config)


@pytest.fixture
def client(app):
    return TestClient(app)


class TestCreateApp:
    """Tests for application setup."""

    def test_temp_storage_created(self, app, tmp_path):
        assert (tmp_path / "temp").is_dir()
        assert app.state.storage.ready is True

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_platforms(self, client):
        assert client.get("/api/platforms").json() == {
            "platforms": ["facebook", "tiktok", "twitter", "youtube"],
        }


class TestExtractEndpoint:
    """Tests for POST /api/extract."""

    def test_generic_record(self, app, client):
        app.state.pipeline.extract = AsyncMock(return_value=generic_record())

        response = client.post("/api/extract", json={"url": "https://example.com/clip"})

        assert response.status_code == 200
        data = response.json()
        assert data["platform"] == "example.com"
        assert data["videoUrl"] == "https://example.com/a.mp4"
        assert data["videoSources"] == [
            {"url": "https://example.com/a.mp4", "type": "video/mp4", "quality": "unknown"},
        ]
        assert "formats" not in data
        app.state.pipeline.extract.assert_awaited_once_with("https://example.com/clip")

    def test_youtube_record_lists_formats(self, app, client):
        source = MediaSource(
            url="https://rr1.googlevideo.com/videoplayback?itag=22",
            quality_label="720p",
            format_id="22",
        )
        record = VideoRecord(
            title="Song",
            platform="youtube",
            source_url="https://www.youtube.com/watch?v=x",
            author="Singer",
            duration_seconds=200,
            primary_media_url=source.url,
            candidate_media_sources=(source,),
        )
        app.state.pipeline.extract = AsyncMock(return_value=record)

        data = client.post("/api/extract", json={"url": "https://youtu.be/x"}).json()

        assert data["formats"] == [{"quality": "720p", "mimeType": "video/mp4", "itag": "22"}]
        assert "videoSources" not in data
        assert data["duration"] == 200

    def test_url_in_query(self, app, client):
        app.state.pipeline.extract = AsyncMock(return_value=generic_record())
        client.post("/api/extract", params={"url": "https://example.com/clip"})
        app.state.pipeline.extract.assert_awaited_once_with("https://example.com/clip")

    def test_invalid_url(self, client):
        response = client.post("/api/extract", json={"url": "not-a-url"})
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL format"}

    def test_missing_url(self, client):
        response = client.post("/api/extract", json={})
        assert response.status_code == 400
        assert response.json() == {"message": "URL is required"}

    def test_non_string_url(self, client):
        response = client.post("/api/extract", json={"url": 123})
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL format"}

    def test_malformed_body(self, client):
        response = client.post(
            "/api/extract",
            content="not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL format"}

    def test_extraction_failure(self, app, client):
        app.state.pipeline.extract = AsyncMock(
            side_effect=ExtractionError("Failed to extract TikTok video. HTTP 403", "tiktok")
        )
        response = client.post("/api/extract", json={"url": "https://www.tiktok.com/@a/video/1"})
        assert response.status_code == 500
        assert response.json() == {"message": "Failed to extract TikTok video. HTTP 403"}


class TestDownloadEndpoint:
    """Tests for GET /api/download."""

    def test_invalid_url(self, client):
        response = client.get("/api/download", params={"url": "not-a-url"})
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL format"}

    def test_no_locator(self, app, client):
        app.state.pipeline.resolve_download = AsyncMock(
            side_effect=LocatorNotFoundError("Could not find video URL in TikTok page", "tiktok")
        )
        response = client.get("/api/download", params={"url": "https://www.tiktok.com/@a/video/1"})
        assert response.status_code == 500
        assert response.json() == {"message": "Could not find video URL in TikTok page"}

    @pytest.mark.asyncio
    async def test_streams_upstream(self, app, upstream, payload):
        media_url = str(upstream.make_url('/video.mp4'))
        app.state.pipeline.resolve_download = AsyncMock(return_value=DownloadPlan(
            record=generic_record(media_url),
            locator=media_url,
            referer="https://example.com/clip",
            filename="1700000000000_clip.mp4",
        ))

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/download", params={"url": "https://example.com/clip"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "video/mp4"
        assert response.headers["content-disposition"] == 'attachment; filename="1700000000000_clip.mp4"'
        assert response.content == payload
        assert upstream.app['requests'][-1]['Referer'] == "https://example.com/clip"

    @pytest.mark.asyncio
    async def test_upstream_error_before_streaming(self, app, upstream):
        media_url = str(upstream.make_url('/error.mp4'))
        app.state.pipeline.resolve_download = AsyncMock(return_value=DownloadPlan(
            record=generic_record(media_url),
            locator=media_url,
            referer=None,
            filename="1_clip.mp4",
        ))

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/download", params={"url": "https://example.com/clip"})

        assert response.status_code == 500
        assert response.json() == {"message": "Upstream returned HTTP 500"}


class TestRelayResponse:
    """Tests for RelayResponse driven directly over ASGI."""

    SCOPE = {"type": "http", "method": "GET", "path": "/api/download", "headers": []}

    @staticmethod
    def body_bytes(messages):
        return b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")

    @pytest.mark.asyncio
    async def test_upstream_drops_mid_stream(self, upstream, payload):
        session = RelaySession(str(upstream.make_url('/truncated.mp4')), chunk_size=1024)
        await session.open()
        messages = []
        never = asyncio.Event()

        async def receive():
            await never.wait()

        async def send(message):
            messages.append(message)

        with pytest.raises(RelayError):
            await RelayResponse(session, "1_clip.mp4")(self.SCOPE, receive, send)

        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        sent = self.body_bytes(messages)
        assert 1024 <= len(sent) < len(payload)
        assert payload.startswith(sent)
        assert session.is_open is False

    @pytest.mark.asyncio
    async def test_client_disconnect_closes_upstream(self, upstream, payload):
        session = RelaySession(str(upstream.make_url('/video.mp4')), chunk_size=1024)
        await session.open()
        messages = []
        first_body = asyncio.Event()

        async def receive():
            await first_body.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            messages.append(message)
            if message.get("body"):
                first_body.set()
            await asyncio.sleep(0.01)

        await RelayResponse(session, "1_clip.mp4")(self.SCOPE, receive, send)

        assert len(self.body_bytes(messages)) < len(payload)
        assert session.is_open is False
