import logging
from typing import Dict, Optional

import httpx

from .abc import CaptchaVerifier

_logger = logging.getLogger(__name__)


class WebCaptchaVerifier(CaptchaVerifier):
    """
    Verifies tokens against a siteverify endpoint (hCaptcha, reCAPTCHA and
    Turnstile share the same form fields).

    Fail-closed: anything but an explicit success answer yields False.
    """

    def __init__(
        self,
        verify_url: str,
        secret: str,
        timeout: float = 10,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.verify_url = verify_url
        self.secret = secret
        if client is None:
            client = httpx.AsyncClient(timeout=timeout)
        self.client = client

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        if not token:
            return False
        if not self.secret:
            _logger.error("captcha secret is not configured, reject the request")
            return False

        data: Dict[str, str] = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            resp = await self.client.post(self.verify_url, data=data)
            resp.raise_for_status()
            content = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            _logger.error(f"captcha verification failed: {e}")
            return False

        if not isinstance(content, dict):
            return False
        success = content.get("success", False) is True
        if not success:
            _logger.info(f"captcha rejected: {content.get('error-codes', [])}")
        return success

    async def close(self):
        await self.client.aclose()
