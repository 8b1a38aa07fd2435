"""Downstream presentation services used after a transaction settles."""

from mvx_agent.services.qrcode import QRCodeService

__all__ = ["QRCodeService"]
