"""QR code generation for shareable links, via the QR code API over httpx.

Best-effort: every failure becomes a ``DownstreamServiceError`` for the
action to report.
"""

from __future__ import annotations

import logging

import httpx

from mvx_agent.errors import DownstreamServiceError

logger = logging.getLogger("mvx_agent.services.qrcode")

SERVICE_NAME = "QR code generation"


class QRCodeService:
    """Client for ``POST /generate_qr?data=...`` returning ``{"preview_url"}``."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _post(self, data: str) -> httpx.Response:
        # httpx url-encodes the query parameter
        if self._client is not None:
            return await self._client.post(
                f"{self.api_url}/generate_qr", params={"data": data}, timeout=self.timeout
            )
        async with httpx.AsyncClient() as client:
            return await client.post(
                f"{self.api_url}/generate_qr", params={"data": data}, timeout=self.timeout
            )

    async def generate(self, data: str) -> str:
        """Return the absolute URL of a QR code image encoding *data*."""
        try:
            resp = await self._post(data)
        except httpx.HTTPError as exc:
            raise DownstreamServiceError(SERVICE_NAME, f"request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise DownstreamServiceError(SERVICE_NAME, f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise DownstreamServiceError(SERVICE_NAME, "response was not JSON") from exc

        preview = body.get("preview_url") if isinstance(body, dict) else None
        if not preview:
            raise DownstreamServiceError(SERVICE_NAME, "no image URL returned")

        image_url = preview if preview.startswith("http") else f"{self.api_url}{preview}"
        logger.info(f"QR code generated: {image_url}")
        return image_url
