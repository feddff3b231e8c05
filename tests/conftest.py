import pathlib

import pytest
from eth_abi import encode
from eth_utils import event_signature_to_log_topic, function_signature_to_4byte_selector

from decoding import load_schema

FIXTURES = pathlib.Path(__file__).resolve().parent / "fixtures"
ABI_DIR = FIXTURES / "abi"

WALLET = "0xc4d46ecbc83f41d0bf71a39868d3f830299068b8"
MODULE = "0x" + "11" * 20
NEW_OWNER = "0x" + "22" * 20


@pytest.fixture
def abi_dir() -> str:
    return str(ABI_DIR)


@pytest.fixture
def registry(abi_dir):
    return load_schema(abi_dir, "test", "WalletModule")


@pytest.fixture
def encode_call():
    """encode_call("addModule(address)", ["address"], [addr]) -> 0x hex payload"""
    def _encode(signature, types, values) -> str:
        return "0x" + (function_signature_to_4byte_selector(signature) + encode(types, values)).hex()
    return _encode


@pytest.fixture
def event_topic():
    def _topic(signature) -> str:
        return "0x" + event_signature_to_log_topic(signature).hex()
    return _topic


@pytest.fixture
def word():
    """32-byte topic/data word for an address or int."""
    def _word(value) -> str:
        if isinstance(value, str):
            return "0x" + value[2:].lower().rjust(64, "0")
        return "0x" + format(value, "064x")
    return _word


@pytest.fixture
def raw_log(event_topic, word):
    """Etherscan shaped ModuleAdded log for WALLET."""
    def _log(**overrides):
        log = {
            "address": "0x" + "ab" * 20,
            "topics": [
                event_topic("ModuleAdded(address,address)"),
                word(WALLET),
            ],
            "data": word(MODULE),
            "blockNumber": "0x9a1e30",
            "timeStamp": "0x5ee8e4a1",
            "gasPrice": "0x12a05f2000",
            "gasUsed": "0x1d4c0",
            "logIndex": "0x",
            "transactionIndex": "0x1f",
            "transactionHash": "0x" + "aa" * 32,
        }
        log.update(overrides)
        return log
    return _log
