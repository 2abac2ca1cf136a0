"""
Chevereto integration provider.

This module implements the Chevereto-specific protocol: a reachability probe
and a relayed image upload. Both talk to the same endpoint of the Chevereto
v1 API, authenticated with the user's key in the ``X-API-Key`` header.

API Documentation: https://v4-docs.chevereto.com/developer/api/api-v1.html

Probe:
    GET {domain}/api/1/upload. The endpoint only accepts POST, so a healthy
    server rejects the request (usually 405). Any HTTP answer proves the host
    and API surface exist; only a transport failure or a 404 means the domain
    is wrong. Do not turn this into a POST: that would upload during
    diagnostics.

Upload:
    POST {domain}/api/1/upload, multipart fields ``source`` (file),
    ``album_id`` (optional) and ``title`` (original filename).
    Success body: {"image": {"url": "...", ...}}
    Error body:   {"error": {"message": "..."}}
"""
import json
from typing import Any, BinaryIO, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.logging_config import log_debug, log_info, log_warning
from app.integrations.schemas import ProbeResult, ProbeStatus, RelayOutcome

UPLOAD_API_PATH = "/api/1/upload"
API_KEY_HEADER = "X-API-Key"
# Sent for every file part; the relay never inspects content.
UPLOAD_CONTENT_TYPE = "application/octet-stream"


def normalize_domain(domain: str) -> str:
    """Trim whitespace and strip every trailing slash: ``" http://x/// "`` -> ``"http://x"``."""
    return (domain or "").strip().rstrip("/")


def build_upload_url(domain: str) -> httpx.URL:
    """
    Raises:
        httpx.InvalidURL: the domain does not parse as a URL
        httpx.UnsupportedProtocol: the scheme is not http or https
    """
    url = httpx.URL(f"{normalize_domain(domain)}{UPLOAD_API_PATH}")
    if url.scheme not in ("http", "https"):
        raise httpx.UnsupportedProtocol(f"Unsupported URL scheme: {url.scheme!r}")
    return url


def _describe_transport_error(exc: httpx.TransportError) -> str:
    """Short reason for a transport failure, without the raw library message."""
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.ConnectError):
        return "could not connect to server"
    if isinstance(exc, httpx.RemoteProtocolError):
        return "server closed the connection unexpectedly"
    return "network error"


def classify_probe_status(status_code: int) -> ProbeStatus:
    """Map the HTTP status of a probe response to a reachability class."""
    if status_code == httpx.codes.NOT_FOUND:
        return ProbeStatus.ENDPOINT_NOT_FOUND
    if status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
        return ProbeStatus.AUTHENTICATION_REJECTED
    # 2xx, 3xx, 400, 405, 5xx: the server answered, so it is reachable
    return ProbeStatus.REACHABLE


async def probe(
    client: httpx.AsyncClient,
    domain: str,
    api_key: str,
    timeout: Optional[float] = None,
) -> ProbeResult:
    """
    Check whether a Chevereto server is reachable with the given key.

    Never raises for network failures; those are returned as
    CONNECTION_FAILED. A domain that cannot form a request URL is UNRECOGNIZED.

    Raises:
        ValidationError: domain or api_key is blank.
    """
    domain = normalize_domain(domain)
    api_key = (api_key or "").strip()
    if not domain or not api_key:
        raise ValidationError("Domain and API Key are required")

    timeout = timeout if timeout is not None else settings.chevereto_probe_timeout_seconds

    try:
        url = build_upload_url(domain)
        async with client.stream(
            "GET", url, headers={API_KEY_HEADER: api_key}, timeout=timeout
        ) as response:
            status_code = response.status_code
            # Drain so the connection can go back to the pool; content is irrelevant
            try:
                async for _ in response.aiter_raw():
                    pass
            except httpx.TransportError as exc:
                log_debug("Probe response body not fully drained", url=str(url), error=type(exc).__name__)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
        log_info("Chevereto probe rejected domain", domain=domain, error=str(exc))
        return ProbeResult(status=ProbeStatus.UNRECOGNIZED, detail=f"'{domain}' is not a valid http(s) URL")
    except UnicodeEncodeError:
        # Header values must be ASCII
        log_info("Chevereto probe failed", domain=domain, reason="invalid API key")
        return ProbeResult(status=ProbeStatus.CONNECTION_FAILED, detail="invalid API key")
    except httpx.TransportError as exc:
        detail = _describe_transport_error(exc)
        log_info("Chevereto probe failed", domain=domain, reason=detail, error=type(exc).__name__)
        return ProbeResult(status=ProbeStatus.CONNECTION_FAILED, detail=detail)

    result = ProbeResult(status=classify_probe_status(status_code))
    log_info("Chevereto probe finished", domain=domain, status_code=status_code, result=result.status.value)
    return result


def _extract_error_message(body: bytes) -> Optional[str]:
    """Return ``error.message`` from an error body if it is there and a string."""
    try:
        payload: Any = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    return message if isinstance(message, str) else None


def interpret_upload_response(status_code: int, body: bytes) -> RelayOutcome:
    """
    Translate a Chevereto upload response into a RelayOutcome.

    Shape checks run in order and nothing in the body is trusted before its
    type has been checked.
    """
    if not httpx.codes.is_success(status_code):
        message = _extract_error_message(body)
        if message is not None:
            return RelayOutcome.failed(f"Chevereto error: {message}")
        return RelayOutcome.failed(f"Chevereto returned status {status_code}")

    try:
        payload: Any = json.loads(body)
    except ValueError:
        return RelayOutcome.failed("Failed to parse Chevereto response")

    image = payload.get("image") if isinstance(payload, dict) else None
    if not isinstance(image, dict):
        return RelayOutcome.failed("No image data in Chevereto response")

    image_url = image.get("url")
    if not isinstance(image_url, str) or not image_url:
        return RelayOutcome.failed("No image URL in Chevereto response")

    return RelayOutcome.succeeded(image_url)


async def upload(
    client: httpx.AsyncClient,
    domain: str,
    api_key: str,
    file: BinaryIO,
    filename: str,
    album_id: str = "",
    timeout: Optional[float] = None,
) -> RelayOutcome:
    """
    Forward one file to Chevereto and normalize the answer.

    The file object is streamed as-is into the ``source`` part and consumed
    once. The multipart boundary header is set by httpx.
    """
    timeout = timeout if timeout is not None else settings.chevereto_upload_timeout_seconds

    data = {"title": filename}
    if album_id:
        data["album_id"] = album_id
    files = {"source": (filename, file, UPLOAD_CONTENT_TYPE)}

    try:
        url = build_upload_url(domain)
        response = await client.post(
            url,
            headers={API_KEY_HEADER: api_key},
            data=data,
            files=files,
            timeout=timeout,
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
        log_warning("Chevereto upload rejected domain", domain=domain, error=str(exc))
        return RelayOutcome.failed("Upload to Chevereto failed: invalid domain URL")
    except UnicodeEncodeError:
        log_warning("Chevereto upload failed", domain=domain, reason="invalid API key")
        return RelayOutcome.failed("Upload to Chevereto failed: invalid API key")
    except httpx.TransportError as exc:
        reason = _describe_transport_error(exc)
        log_warning("Chevereto upload failed", domain=domain, reason=reason, error=type(exc).__name__)
        return RelayOutcome.failed(f"Upload to Chevereto failed: {reason}")
    except OSError as exc:
        log_warning("Could not read inbound file", filename=filename, error=str(exc))
        return RelayOutcome.failed("Failed to read file")

    outcome = interpret_upload_response(response.status_code, response.content)
    if not outcome.success:
        log_warning(
            "Chevereto rejected upload",
            domain=domain,
            status_code=response.status_code,
            reason=outcome.message,
        )
    return outcome
