import json

import pytest

from etl import cli
from ingestion.client import FetchError

ENV = ("RPC_URL_OVERRIDE", "INFURA_API_KEY", "ETHERSCAN_API_KEY", "MODULE_ENDPOINT")


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda *a, **k: False)
    monkeypatch.setenv("INFURA_API_KEY", "k")
    monkeypatch.setenv("ETHERSCAN_API_KEY", "e")
    monkeypatch.setenv("MODULE_ENDPOINT", "https://registry.example")
    return str(tmp_path / "missing.yaml")


def test_parser_reads_block_range():
    args = cli.build_parser().parse_args(["--from", "5", "--to", "9", "--json", "--method", ""])
    assert args.from_block == 5
    assert args.to_block == 9
    assert args.json is True
    assert args.method == ""


def test_main_prints_json(env, monkeypatch, capsys):
    seen = {}

    def fake_run(client, settings, **kw):
        seen.update(kw)
        return [{"transactionHash": "0x1", "funName": "addModule", "blockNumber": 1}]

    monkeypatch.setattr(cli, "run_pipeline", fake_run)
    code = cli.main(["--config", env, "--json", "--module", "ApprovedTransfer",
                     "--wallet", "0x" + "AB" * 20, "--method", "", "--on-error", "skip"])
    assert code == 0
    assert json.loads(capsys.readouterr().out)[0]["funName"] == "addModule"
    assert seen["module"] == "ApprovedTransfer"
    assert seen["version"] == "1.6.0"
    assert seen["wallet"] == "0x" + "ab" * 20
    assert seen["method"] == ""
    assert seen["on_error"] == "skip"
    assert seen["address"] is None
    assert (seen["from_block"], seen["to_block"]) == (10000000, 20000000)


def test_main_text_output(env, monkeypatch, capsys):
    monkeypatch.setattr(cli, "run_pipeline", lambda client, settings, **kw: [{"funName": "addModule"}])
    assert cli.main(["--config", env]) == 0
    assert "'funName': 'addModule'" in capsys.readouterr().out


def test_missing_etherscan_key(env, monkeypatch, capsys):
    monkeypatch.delenv("ETHERSCAN_API_KEY")
    assert cli.main(["--config", env]) == 2
    assert "ETHERSCAN_API_KEY" in capsys.readouterr().err


def test_missing_rpc(env, monkeypatch, capsys):
    monkeypatch.delenv("INFURA_API_KEY")
    assert cli.main(["--config", env]) == 2
    assert "INFURA_API_KEY" in capsys.readouterr().err


def test_address_skips_registry(env, monkeypatch):
    monkeypatch.delenv("MODULE_ENDPOINT")
    seen = {}
    monkeypatch.setattr(cli, "run_pipeline", lambda client, settings, **kw: seen.update(kw) or [])
    assert cli.main(["--config", env, "--address", "0x" + "cd" * 20]) == 0
    assert seen["address"] == "0x" + "cd" * 20


def test_missing_endpoint_without_address(env, monkeypatch):
    monkeypatch.delenv("MODULE_ENDPOINT")
    assert cli.main(["--config", env]) == 2


def test_bad_wallet(env):
    assert cli.main(["--config", env, "--wallet", "0x12"]) == 2


def test_bad_block_range(env):
    assert cli.main(["--config", env, "--from", "10", "--to", "5"]) == 2


def test_fetch_error_exit_code(env, monkeypatch):
    def boom(client, settings, **kw):
        raise FetchError("GET api.etherscan.io failed")
    monkeypatch.setattr(cli, "run_pipeline", boom)
    assert cli.main(["--config", env]) == 1
