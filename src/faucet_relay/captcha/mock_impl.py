from typing import Iterable, Optional

from .abc import CaptchaVerifier


class MockCaptchaVerifier(CaptchaVerifier):
    def __init__(self, valid_tokens: Iterable[str] = ("valid-token",)) -> None:
        self.valid_tokens = set(valid_tokens)
        self.calls = 0

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        self.calls += 1
        return token is not None and token in self.valid_tokens

    async def close(self):
        pass
