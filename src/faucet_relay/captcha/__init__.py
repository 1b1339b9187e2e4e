from .abc import CaptchaVerifier
from .mock_impl import MockCaptchaVerifier
from .web_impl import WebCaptchaVerifier

__all__ = [
    "CaptchaVerifier",
    "MockCaptchaVerifier",
    "WebCaptchaVerifier",
]
