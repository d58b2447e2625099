"""Streaming relay from an upstream media URL to a destination sink."""

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator, Optional

import aiohttp

from ..errors import RelayError
from ..extractor.base import DESKTOP_USER_AGENT
from ..utils.formatting import human_readable_size
from .sinks import RelaySink


logger = logging.getLogger(__name__)


DEFAULT_CHUNK_SIZE = 64 * 1024


class RelaySession:
    """
    One upstream media connection, owned exclusively by one relay.

    ``open()`` connects and reads the first chunk, so a dead or empty
    upstream is reported before anything reaches the destination.
    ``iter_chunks()`` then yields the body piece by piece; memory use is
    bounded by ``chunk_size`` plus aiohttp's read buffer. ``close()`` is
    idempotent and must run on every exit path (``async with`` does it).
    """

    def __init__(
        self,
        locator: Optional[str],
        referer: Optional[str] = None,
        user_agent: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        connect_timeout: float = 15,
        read_timeout: float = 60,
    ):
        self.locator = locator
        self.referer = referer
        self.user_agent = user_agent or DESKTOP_USER_AGENT
        self.chunk_size = chunk_size
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

        self.bytes_relayed = 0
        self.content_type: Optional[str] = None
        self.content_length: Optional[int] = None

        self._session: Optional[aiohttp.ClientSession] = None
        self._response: Optional[aiohttp.ClientResponse] = None
        self._first_chunk: Optional[bytes] = None
        self._closed = False

    async def __aenter__(self) -> "RelaySession":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._response is not None and not self._closed

    def _request_headers(self) -> dict[str, str]:
        headers = {
            'User-Agent': self.user_agent,
            'Accept': '*/*',
            'Accept-Language': 'en-US,en;q=0.9',
        }
        if self.referer:
            headers['Referer'] = self.referer
        return headers

    async def open(self) -> "RelaySession":
        """
        Connect to the upstream and read the first chunk.

        Raises:
            RelayError: If there is no locator, the connection fails, the
                upstream answers with an error status or sends no data
        """
        if not self.locator:
            raise RelayError("No media locator to relay")
        if self._closed:
            raise RelayError("Relay session already closed", self.locator)
        if self._response is not None:
            return self

        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.connect_timeout,
            sock_read=self.read_timeout,
        )
        self._session = aiohttp.ClientSession(timeout=timeout)

        try:
            self._response = await self._session.get(
                self.locator,
                headers=self._request_headers(),
                allow_redirects=True,
            )
            if self._response.status >= 400:
                raise RelayError(f"Upstream returned HTTP {self._response.status}", self.locator)

            self.content_type = self._response.headers.get('Content-Type')
            self.content_length = self._response.content_length

            self._first_chunk = await self._read_chunk()
            if not self._first_chunk:
                raise RelayError("Upstream returned no data", self.locator)

        except RelayError:
            await self.close()
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await self.close()
            raise RelayError(f"Failed to connect to upstream: {str(e) or type(e).__name__}", self.locator) from e
        except BaseException:
            await self.close()
            raise

        logger.info("Relay opened for %s (%s)", self.locator, self.content_type or "unknown type")
        return self

    async def _read_chunk(self) -> bytes:
        return await self._response.content.read(self.chunk_size)

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """
        Yield the upstream body as it arrives.

        The upstream is closed when iteration ends for any reason,
        including the consumer closing the generator early.

        Raises:
            RelayError: If the upstream fails mid-stream
        """
        if self._response is None:
            await self.open()

        try:
            chunk = self._first_chunk
            self._first_chunk = None
            while chunk:
                self.bytes_relayed += len(chunk)
                yield chunk
                chunk = await self._read_chunk()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "Upstream failed after %s for %s: %s",
                human_readable_size(self.bytes_relayed), self.locator, e,
            )
            raise RelayError(
                f"Upstream failed after {self.bytes_relayed} bytes: {str(e) or type(e).__name__}",
                self.locator,
            ) from e
        finally:
            await self.close()

    async def close(self) -> None:
        """Release the upstream response and HTTP session."""
        if self._closed:
            return
        self._closed = True

        if self._response is not None:
            # Drops the connection instead of draining an unread body
            self._response.close()
        if self._session is not None:
            await self._session.close()

        if self._response is not None:
            logger.info(
                "Relay closed for %s after %s",
                self.locator, human_readable_size(self.bytes_relayed),
            )


async def relay(
    locator: Optional[str],
    sink: RelaySink,
    referer: Optional[str] = None,
    user_agent: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    connect_timeout: float = 15,
    read_timeout: float = 60,
) -> int:
    """
    Pipe a media URL into a sink.

    Each chunk is written (and awaited) before the next one is read, so a
    slow sink slows the upstream read instead of growing a buffer. The sink
    is finalized on a clean end and aborted on any failure or cancellation;
    its temporary artifact is deleted on every exit path.

    Args:
        locator: Absolute media URL
        sink: Destination
        referer: Referer header for hotlink-protected origins

    Returns:
        Number of bytes relayed

    Raises:
        RelayError: If the upstream cannot be opened or fails mid-stream
    """
    session = RelaySession(
        locator,
        referer=referer,
        user_agent=user_agent,
        chunk_size=chunk_size,
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )
    try:
        await session.open()
        async with aclosing(session.iter_chunks()) as chunks:
            async for chunk in chunks:
                await sink.write(chunk)
        await sink.finalize()
        return session.bytes_relayed
    except BaseException as e:
        try:
            await sink.abort(e)
        except Exception:
            logger.exception("Sink abort failed")
        raise
    finally:
        await session.close()
        sink.cleanup()
