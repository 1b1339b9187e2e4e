from enum import Enum


class RevertReason(str, Enum):
    CooldownActive = "Wait before next claim"
    FaucetEmpty = "Faucet empty"
    FaucetPaused = "Faucet paused"
    InvalidRecipient = "Invalid recipient"
    NotOwner = "Not owner"
    Unknown = "Unknown"

    @classmethod
    def from_message(cls, message: str) -> "RevertReason":
        for reason in cls:
            if reason is not cls.Unknown and message.strip() == reason.value:
                return reason
        return cls.Unknown


class ChainError(Exception):
    def __init__(self, method: str, message: str) -> None:
        self.method = method
        self.message = message

    def __str__(self) -> str:
        return f"{self.method} failed: {self.message}"


class ChainRejected(ChainError):
    """The contract reverted the call."""

    def __init__(self, method: str, reason: RevertReason, message: str) -> None:
        super().__init__(method, message)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.method} is rejected: {self.message}"


class TransportError(ChainError):
    """The call never got a verdict from the chain (RPC, network or timeout failure)."""
