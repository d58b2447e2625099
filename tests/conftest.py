"""Shared fixtures: a local upstream media server and temp storage."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from video_relay.relay import TempStorage


# Spans several relay chunks at the default chunk size
PAYLOAD = bytes(range(256)) * 1024


def _build_upstream_app() -> web.Application:
    async def video(request):
        request.app['requests'].append(request.headers.copy())
        return web.Response(body=PAYLOAD, content_type='video/mp4')

    async def empty(request):
        return web.Response(body=b'', content_type='video/mp4')

    async def server_error(request):
        return web.Response(status=500, text='boom')

    async def truncated(request):
        # Promises more bytes than it sends, then drops the connection
        response = web.StreamResponse(headers={'Content-Length': str(len(PAYLOAD))})
        response.content_type = 'video/mp4'
        await response.prepare(request)
        await response.write(PAYLOAD[:4096])
        await asyncio.sleep(0.1)
        request.transport.close()
        return response

    async def page(request):
        return web.Response(
            text='<html><head><meta property="og:title" content="Local clip"></head>'
                 '<body><video src="/video.mp4"></video></body></html>',
            content_type='text/html',
        )

    async def missing(request):
        return web.Response(status=404, text='not found')

    app = web.Application()
    app['requests'] = []
    app.router.add_get('/video.mp4', video)
    app.router.add_get('/empty.mp4', empty)
    app.router.add_get('/error.mp4', server_error)
    app.router.add_get('/truncated.mp4', truncated)
    app.router.add_get('/page', page)
    app.router.add_get('/missing', missing)
    return app


@pytest_asyncio.fixture
async def upstream():
    """A running local HTTP server; ``upstream.make_url(path)`` builds URLs."""
    server = TestServer(_build_upstream_app())
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def payload():
    """Body served by the upstream at /video.mp4."""
    return PAYLOAD


@pytest.fixture
def storage(tmp_path):
    """Temp storage rooted in the test's tmp directory."""
    temp = TempStorage(tmp_path / "temp")
    temp.ensure()
    return temp
