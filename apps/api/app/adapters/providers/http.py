"""Shared HTTP plumbing for provider adapters."""

from __future__ import annotations

from typing import Any

import httpx

from app.errors import TransientProviderError


async def send_provider_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    timeout: float,
    http_client: httpx.AsyncClient | None = None,
    json: Any = None,
) -> httpx.Response:
    """Send one request; transport failures, 429 and 5xx become ``TransientProviderError``."""
    try:
        if http_client is not None:
            response = await http_client.request(method, url, headers=headers, json=json, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.request(method, url, headers=headers, json=json)
    except httpx.TimeoutException as exc:
        raise TransientProviderError("provider request timed out") from exc
    except httpx.HTTPError as exc:
        raise TransientProviderError(f"provider request failed: {type(exc).__name__}") from exc

    if response.status_code == 429 or response.status_code >= 500:
        raise TransientProviderError(f"provider returned HTTP {response.status_code}")
    return response


def decode_json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise TransientProviderError("provider returned a non-JSON body") from exc
