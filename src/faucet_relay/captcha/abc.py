from abc import ABC, abstractmethod
from typing import Optional


class CaptchaVerifier(ABC):
    @abstractmethod
    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        ...

    @abstractmethod
    async def close(self):
        ...
