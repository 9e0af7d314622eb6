"""
Payload loading over HTTP.
Fetches a JSON or delimited trace payload and decodes it for the normalizer.
"""

from typing import Any, Optional

import httpx

from ..config import FETCH_TIMEOUT_SECONDS
from ..errors import LoadFailure
from ..logger import setup_logger
from ..parsing import decode_payload

logger = setup_logger(__name__)


def decode_response(response: httpx.Response) -> Any:
    """
    Decode a fetched payload.

    JSON content types are parsed as JSON; anything else is sniffed
    (JSON if it looks like it, tabular text otherwise).

    Raises:
        LoadFailure: If the body cannot be decoded
    """
    content_type = response.headers.get('content-type', '')
    if 'json' in content_type:
        try:
            return response.json()
        except ValueError as e:
            raise LoadFailure(f"Invalid JSON payload: {e}") from e
    return decode_payload(response.text)


async def fetch_payload(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> Any:
    """
    Fetch and decode a trace payload.

    Args:
        url: Payload location
        client: Optional shared client (a temporary one is used otherwise)
        timeout: Request timeout in seconds for the temporary client

    Returns:
        Decoded payload, ready for normalize()

    Raises:
        LoadFailure: On network, HTTP status, or decoding errors
    """
    logger.debug(f"Fetching trace payload: {url}")
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        logger.error(f"Trace fetch timed out: {url}")
        raise LoadFailure("Request timed out") from e
    except httpx.HTTPStatusError as e:
        logger.error(f"Trace fetch failed: HTTP {e.response.status_code} for {url}")
        raise LoadFailure(f"HTTP {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        logger.error(f"Trace fetch error: {e}")
        raise LoadFailure(f"Could not reach {url}") from e

    payload = decode_response(response)
    logger.info(f"Fetched trace payload from {url} ({len(response.content)} bytes)")
    return payload
