"""
Bounded HTTP reads against media playback URLs.

Every read is a ranged GET streamed with a hard byte limit, so a server
that ignores the Range header still never delivers the whole file. Each
request also runs under one overall deadline: httpx timeouts only bound
individual connect/read steps, and a server trickling bytes would never
trip them.
"""

import asyncio

import httpx

PARTIAL_CONTENT = 206


class MediaFetchError(Exception):
    """A HEAD or ranged GET against a media URL failed."""


async def head_content_length(client: httpx.AsyncClient, url: str, timeout: float) -> int:
    """Return the media size reported by a HEAD request.

    Raises:
        MediaFetchError: On transport error, timeout, non-success status, or
            a missing/invalid Content-Length
    """
    try:
        async with asyncio.timeout(timeout):
            response = await client.head(url, timeout=timeout, follow_redirects=True)
    except TimeoutError:
        raise MediaFetchError(f"HEAD {url} timed out after {timeout}s") from None
    except httpx.HTTPError as e:
        raise MediaFetchError(f"HEAD {url} failed: {e}") from e

    if not response.is_success:
        raise MediaFetchError(f"HEAD {url} returned {response.status_code}")

    try:
        size = int(response.headers.get("content-length", ""))
    except ValueError:
        raise MediaFetchError(f"HEAD {url} has no usable Content-Length") from None
    if size <= 0:
        raise MediaFetchError(f"HEAD {url} reported empty content")
    return size


async def _read_limited(response: httpx.Response, limit: int) -> bytes:
    chunks: list[bytes] = []
    received = 0
    async for chunk in response.aiter_bytes():
        chunks.append(chunk)
        received += len(chunk)
        if received >= limit:
            break
    return b"".join(chunks)[:limit]


async def fetch_range(
    client: httpx.AsyncClient, url: str, start: int, end: int, timeout: float
) -> tuple[bytes, str]:
    """GET bytes [start, end] inclusive of url.

    A full-body 200 answer is accepted only for ranges starting at 0; for
    any other range it would hand back the wrong bytes.

    Returns:
        (data, content_type) with at most end - start + 1 bytes

    Raises:
        MediaFetchError: On transport error, timeout, or an unusable status
    """
    limit = end - start + 1
    headers = {"Range": f"bytes={start}-{end}"}
    try:
        async with asyncio.timeout(timeout):
            async with client.stream(
                "GET", url, headers=headers, timeout=timeout, follow_redirects=True
            ) as response:
                status = response.status_code
                if not response.is_success:
                    raise MediaFetchError(f"GET {url} returned {status}")
                if start > 0 and status != PARTIAL_CONTENT:
                    raise MediaFetchError(
                        f"GET {url} ignored Range {headers['Range']} (status {status})"
                    )
                content_type = response.headers.get("content-type", "")
                data = await _read_limited(response, limit)
    except TimeoutError:
        raise MediaFetchError(
            f"GET {url} ({headers['Range']}) timed out after {timeout}s"
        ) from None
    except httpx.HTTPError as e:
        raise MediaFetchError(f"GET {url} ({headers['Range']}) failed: {e}") from e

    return data, content_type
