"""Automated scanner detection.

Link-preview bots and mail security scanners fetch URLs before a human
does. Requests whose User-Agent matches a scanner pattern are flagged on
``request.state.is_automated_scanner`` so the secrets endpoint can read a
secret without consuming it. The flag has no other effect.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from fastapi import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def is_automated_scanner(user_agent: str | None, patterns: Iterable[str]) -> bool:
    """Return True if ``user_agent`` contains any pattern, case-insensitively."""
    if not user_agent:
        return False
    lowered = user_agent.lower()
    return any(pattern.lower() in lowered for pattern in patterns if pattern)


class ScannerDetector:
    """HTTP middleware that tags each request with the scanner flag.

    Register with ``app.middleware("http")(ScannerDetector(patterns))``.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(patterns)

    async def __call__(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        flagged = is_automated_scanner(request.headers.get("user-agent"), self.patterns)
        request.state.is_automated_scanner = flagged
        if flagged:
            logger.debug("Request to %s flagged as automated scanner", request.url.path)
        return await call_next(request)
