from typing import Optional


class ClaimError(Exception):
    status_code: int = 500

    def __init__(self, message: str, wait: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.wait = wait


class InvalidClaimRequest(ClaimError):
    status_code = 400


class CaptchaRejected(ClaimError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Invalid captcha")


class RateLimited(ClaimError):
    """A local pending or cooldown lock is active for the client."""

    status_code = 429

    def __init__(self, wait: int) -> None:
        super().__init__("Wait before next claim", wait)


class ChainCooldownActive(ClaimError):
    """The contract refused the claim because the recipient cooldown has not elapsed."""

    status_code = 400

    def __init__(self, wait: int) -> None:
        super().__init__("Wait before next claim", wait)


class ClaimFailed(ClaimError):
    status_code = 500
