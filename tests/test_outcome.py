import pytest

from decoding import DecodeError, DecodedCall, SchemaRegistry, correlate_outcome

WALLET = "0xc4d46ecbc83f41d0bf71a39868d3f830299068b8"
EXECUTED = "TransactionExecuted(address,bool,bytes,bytes32)"


@pytest.fixture
def dispatch():
    return DecodedCall(name="execute", args={"_data": "0x"})


def test_result_event_success(registry, dispatch, event_topic, word):
    log = {"topics": [event_topic(EXECUTED), word(WALLET), word(1)]}
    assert correlate_outcome(dispatch, log, registry).success is True


def test_result_event_failure(registry, dispatch, event_topic, word):
    log = {"topics": [event_topic(EXECUTED), word(WALLET), word(0)]}
    out = correlate_outcome(dispatch, log, registry)
    assert out.success is False
    # the input call is left as it was
    assert dispatch.success is None


def test_other_event_counts_as_success(registry, dispatch, raw_log):
    assert correlate_outcome(dispatch, raw_log(), registry).success is True


def test_non_dispatch_untouched(registry, event_topic, word):
    call = DecodedCall(name="addModule", args={})
    log = {"topics": [event_topic(EXECUTED), word(WALLET), word(0)]}
    assert correlate_outcome(call, log, registry) is call
    assert correlate_outcome(None, log, registry) is None


def test_schema_without_result_event(dispatch, event_topic, word):
    reg = SchemaRegistry.from_abi([
        {"type": "function", "name": "execute", "inputs": [{"name": "_data", "type": "bytes"}]},
    ])
    log = {"topics": [event_topic(EXECUTED), word(WALLET), word(0)]}
    assert correlate_outcome(dispatch, log, reg).success is True


def test_result_event_without_flag_topic(registry, dispatch, event_topic, word):
    with pytest.raises(DecodeError):
        correlate_outcome(dispatch, {"topics": [event_topic(EXECUTED), word(WALLET)]}, registry)
