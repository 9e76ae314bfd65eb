"""JSON-over-HTTP transport shared by the generation service adapters."""

from __future__ import annotations

import http.client
import json
import logging
from urllib import error, request

from segment_sql.errors import UpstreamServiceError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def post_json(
    endpoint: str,
    body: dict[str, object],
    *,
    headers: dict[str, str],
    timeout_seconds: float,
    service: str,
) -> dict[str, object]:
    """POST a JSON body and decode the JSON response. No retries."""
    req = request.Request(
        endpoint,
        method="POST",
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json", **headers},
    )

    logger.debug("POST %s (timeout %ss)", endpoint, timeout_seconds)
    try:
        with request.urlopen(req, timeout=timeout_seconds) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        raise UpstreamServiceError(
            f"{service} request failed with HTTP {exc.code}: {details}"
        ) from exc
    except error.URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise UpstreamTimeoutError(
                f"{service} request timed out after {timeout_seconds}s."
            ) from exc
        raise UpstreamServiceError(f"{service} request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise UpstreamTimeoutError(
            f"{service} request timed out after {timeout_seconds}s."
        ) from exc
    except json.JSONDecodeError as exc:
        raise UpstreamServiceError(f"{service} response was not valid JSON.") from exc
    except (OSError, http.client.HTTPException, UnicodeDecodeError) as exc:
        raise UpstreamServiceError(f"{service} request failed: {exc!r}") from exc

    if not isinstance(payload, dict):
        raise UpstreamServiceError(f"{service} response root must be a JSON object.")
    return payload
