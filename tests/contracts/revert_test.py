import pytest
from eth_abi import encode
from web3.exceptions import ContractLogicError

from faucet_relay.chain import RevertReason
from faucet_relay.contracts import TxRevertedError, catch_tx_revert_error, get_revert_reason

pytestmark = pytest.mark.anyio


def revert_data(reason: str) -> str:
    return "0x08c379a0" + encode(["string"], [reason]).hex()


def test_revert_reason_from_data():
    e = ContractLogicError(
        message="execution reverted", data=revert_data("Wait before next claim")
    )
    assert get_revert_reason(e) == "Wait before next claim"


def test_revert_reason_from_message():
    e = ContractLogicError(message="execution reverted: Faucet empty")
    assert get_revert_reason(e) == "Faucet empty"


@pytest.mark.parametrize(
    ["message", "reason"],
    [
        ("Wait before next claim", RevertReason.CooldownActive),
        ("Faucet empty", RevertReason.FaucetEmpty),
        ("Faucet paused", RevertReason.FaucetPaused),
        ("Invalid recipient", RevertReason.InvalidRecipient),
        ("Not owner", RevertReason.NotOwner),
        ("Something else", RevertReason.Unknown),
        ("", RevertReason.Unknown),
    ],
)
def test_revert_reason_code(message: str, reason: RevertReason):
    assert RevertReason.from_message(message) == reason


async def test_catch_tx_revert_error():
    with pytest.raises(TxRevertedError) as exc_info:
        async with catch_tx_revert_error("adminClaimFor"):
            raise ContractLogicError(
                message="execution reverted", data=revert_data("Faucet paused")
            )

    assert exc_info.value.method == "adminClaimFor"
    assert exc_info.value.reason == "Faucet paused"
