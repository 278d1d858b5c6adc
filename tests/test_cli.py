"""craft command line."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml
from click.testing import CliRunner

from craft_toolkit import cli
from craft_toolkit.errors import ErrorCode, RpcError
from craft_toolkit.test_accounts import ALICE, GENESIS

CREATE_YAML = """
code: "0061736d01000000"
functions:
  - name: base
    parameters:
      - type: ACCOUNT
"""

CALL_YAML = f"""
contract_account: {GENESIS}
function: base
computation_allowance: 500
parameters:
  - type: ACCOUNT
    value: {ALICE}
"""


@pytest.fixture
def definitions(tmp_path: Path) -> Dict[str, Path]:
    paths = {
        "create": tmp_path / "create.yaml",
        "call": tmp_path / "call.yaml",
        "bad": tmp_path / "bad.yaml",
    }
    paths["create"].write_text(CREATE_YAML)
    paths["call"].write_text(CALL_YAML)
    paths["bad"].write_text("code: '00'\nfunctions:\n  - name: a\n  - name: a\n")
    return paths


class _FakeClient:
    submitted: list = []
    engine_result = "tesSUCCESS"

    def __init__(self, config: Any, endpoint: Any = None):
        self.endpoint = endpoint

    async def __aenter__(self) -> "_FakeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        pass

    async def submit_and_wait(self, tx_json: Dict[str, Any], secret: str) -> Dict[str, Any]:
        self.submitted.append((tx_json, secret, self.endpoint))
        return {"hash": "CD" * 32, "engine_result": self.engine_result, "meta": {}}

    async def create_contract(self, tx_json: Dict[str, Any], secret: str) -> Dict[str, Any]:
        final = await self.submit_and_wait(tx_json, secret)
        if final["engine_result"] != "tesSUCCESS":
            raise RpcError(ErrorCode.RPC_ERROR, f"ContractCreate failed: {final['engine_result']}")
        return {"id": "AB" * 32, "account": GENESIS, "hash": final["hash"]}


def test_create_json(definitions) -> None:
    result = CliRunner().invoke(cli.main, ["create", str(definitions["create"])])
    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["TransactionType"] == "ContractCreate"
    assert body["ContractCode"] == "0061736D01000000"


def test_call_yaml(definitions) -> None:
    result = CliRunner().invoke(cli.main, ["call", str(definitions["call"]), "--format", "yaml"])
    assert result.exit_code == 0, result.output
    body = yaml.safe_load(result.output)
    assert body["FunctionName"] == "62617365"
    assert body["ComputationAllowance"] == 500


def test_encode_error_exits_nonzero(definitions) -> None:
    result = CliRunner().invoke(cli.main, ["create", str(definitions["bad"])])
    assert result.exit_code == 1
    assert "DUPLICATE_FUNCTION_NAME" in result.output


def test_missing_definition_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli.main, ["call", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 2


def test_submit(definitions, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "LedgerClient", _FakeClient)
    monkeypatch.setattr(_FakeClient, "submitted", [])

    result = CliRunner().invoke(
        cli.main,
        ["submit", str(definitions["call"]), "--endpoint", "http://node:5005"],
        env={"CRAFT_SECRET": "sEdSecret"},
    )
    assert result.exit_code == 0, result.output
    tx_json, secret, endpoint = _FakeClient.submitted[0]
    assert tx_json["TransactionType"] == "ContractCall"
    assert secret == "sEdSecret"
    assert endpoint == "http://node:5005"


def test_submit_failed_engine_result(definitions, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "LedgerClient", _FakeClient)
    monkeypatch.setattr(_FakeClient, "engine_result", "tecNO_PERMISSION")

    result = CliRunner().invoke(cli.main, ["submit", str(definitions["call"]), "--secret", "s"])
    assert result.exit_code == 1
    assert "tecNO_PERMISSION" in result.output


def test_submit_create_prints_contract(definitions, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "LedgerClient", _FakeClient)
    monkeypatch.setattr(_FakeClient, "submitted", [])

    result = CliRunner().invoke(cli.main, ["submit", str(definitions["create"]), "--secret", "s"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"id": "AB" * 32, "account": GENESIS, "hash": "CD" * 32}
    assert _FakeClient.submitted[0][0]["TransactionType"] == "ContractCreate"


def test_submit_create_failure_exits_nonzero(definitions, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "LedgerClient", _FakeClient)
    monkeypatch.setattr(_FakeClient, "engine_result", "tecINSUFFICIENT_RESERVE")

    result = CliRunner().invoke(cli.main, ["submit", str(definitions["create"]), "--secret", "s"])
    assert result.exit_code == 1
    assert "RPC_ERROR" in result.output
    assert "tecINSUFFICIENT_RESERVE" in result.output
