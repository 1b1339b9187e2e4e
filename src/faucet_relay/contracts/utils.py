import json
from contextlib import asynccontextmanager
from typing import Any, Dict, List

import importlib_resources as impresources
from eth_abi.abi import decode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError
from web3.types import TxParams, TxReceipt

from .exceptions import TxRevertedError


def read_abi(name: str) -> List[Dict[str, Any]]:
    file = impresources.files("faucet_relay.contracts.abi") / f"{name}.json"
    with file.open("r", encoding="utf-8") as f:  # type: ignore
        content = json.load(f)

    return content["abi"]


# selector of Error(string)
_ERROR_SELECTOR = "08c379a0"


def get_revert_reason(e: ContractLogicError) -> str:
    data = getattr(e, "data", None)
    if isinstance(data, str):
        data_hex = data[2:] if data.startswith("0x") else data
        if data_hex.startswith(_ERROR_SELECTOR):
            try:
                return decode(["string"], bytes.fromhex(data_hex[8:]))[0]
            except (DecodingError, ValueError):
                pass

    message = getattr(e, "message", None)
    if not message:
        message = str(e)
    prefix = "execution reverted:"
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message.strip()


@asynccontextmanager
async def catch_tx_revert_error(method: str):
    try:
        yield
    except ContractLogicError as e:
        raise TxRevertedError(method=method, reason=get_revert_reason(e)) from e


async def wait_for_receipt(
    w3: AsyncWeb3,
    method: str,
    tx_hash: HexBytes,
    timeout: float = 120,
    interval: float = 0.1,
) -> TxReceipt:
    """
    Wait until the transaction is mined.

    A mined but failed transaction raises ``TxRevertedError``. Its reason is
    recovered by replaying the call on the parent block.
    """
    receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout, interval)
    if receipt["status"]:
        return receipt

    tx_hash_str = Web3.to_hex(tx_hash)
    tx = await w3.eth.get_transaction(tx_hash)
    replay: TxParams = {
        "to": tx["to"],
        "from": tx["from"],
        "value": tx["value"],
        "data": tx["input"],
    }
    block_number = tx["blockNumber"] - 1
    try:
        await w3.eth.call(replay, block_number)
    except ContractLogicError as e:
        raise TxRevertedError(
            method=method, reason=get_revert_reason(e), tx_hash=tx_hash_str
        ) from e
    raise TxRevertedError(
        method=method,
        reason=f"reverted without reason on block {receipt['blockNumber']}",
        tx_hash=tx_hash_str,
    )
