"""JSON-RPC client for a ledger node.

Implements the collaborator side of contract deployment: submitting
assembled transactions and read-only queries. The encode layer does not
depend on this module.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from .config import ClientConfig
from .errors import ErrorCode, RpcError

logger = logging.getLogger(__name__)

ENTRY_NOT_FOUND = "entryNotFound"
TX_NOT_FOUND = "txnNotFound"
CONTRACT_ENTRY_TYPE = "Contract"

# Preliminary results of transactions that were not queued or applied.
NOT_APPLIED = ("tem", "tef", "tel")


class LedgerClient:
    """HTTP JSON-RPC client for a single node."""

    def __init__(self, config: ClientConfig, endpoint: Optional[str] = None):
        self.config = config
        self.endpoint = endpoint or config.endpoint
        self.session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Initialize HTTP session."""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "LedgerClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send one JSON-RPC request and return its ``result`` object."""
        if self.session is None:
            await self.connect()
        payload = {"method": method, "params": [params or {}]}
        logger.debug(f"-> {method} {self.endpoint}")
        try:
            async with self.session.post(self.endpoint, json=payload) as resp:
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise RpcError(ErrorCode.RPC_ERROR, f"{method}: {e}") from e
        except ValueError as e:
            raise RpcError(ErrorCode.RPC_ERROR, f"{method}: response is not JSON: {e}") from e

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            raise RpcError(ErrorCode.RPC_ERROR, f"{method}: malformed response")
        if result.get("status") == "error":
            message = result.get("error_message") or result.get("error") or "unknown error"
            raise RpcError(ErrorCode.RPC_ERROR, f"{method}: {message}", response=result)
        return result

    async def submit(self, tx_json: Dict[str, Any], secret: str) -> Dict[str, Any]:
        """Sign-and-submit through the node; returns the engine result."""
        result = await self.request("submit", {"tx_json": tx_json, "secret": secret})
        logger.info(
            f"[{tx_json.get('TransactionType')}] {result.get('engine_result')}: "
            f"{result.get('engine_result_message', '')}"
        )
        return result

    async def submit_blob(self, tx_blob: str) -> Dict[str, Any]:
        result = await self.request("submit", {"tx_blob": tx_blob})
        logger.info(f"[blob] {result.get('engine_result')}")
        return result

    async def query(self, command: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.request(command, params)

    async def entry_exists(self, index: str) -> bool:
        """Whether a ledger entry exists at ``index`` (e.g. a contract id)."""
        try:
            await self.request("ledger_entry", {"index": index})
        except RpcError as e:
            if e.response and e.response.get("error") == ENTRY_NOT_FOUND:
                return False
            raise
        return True

    async def contract_info(self, contract_account: str, account: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"contract_account": contract_account}
        if account is not None:
            params["account"] = account
        return await self.request("contract_info", params)

    async def wait_for_validation(self, tx_hash: str) -> Dict[str, Any]:
        """Poll ``tx`` until the transaction is in a validated ledger.

        Standalone nodes do not close ledgers on their own, so each poll is
        preceded by ``ledger_accept`` there.
        """
        for _ in range(self.config.max_polls):
            if self.config.standalone:
                await self.request("ledger_accept")
            try:
                result = await self.request("tx", {"transaction": tx_hash})
            except RpcError as e:
                if not (e.response and e.response.get("error") == TX_NOT_FOUND):
                    raise
                result = {}
            if result.get("validated"):
                meta = result.get("meta") or {}
                final = {
                    "hash": tx_hash,
                    "engine_result": meta.get("TransactionResult"),
                    "ledger_index": result.get("ledger_index"),
                    "meta": meta,
                }
                logger.info(f"[{tx_hash}] validated: {final['engine_result']}")
                return final
            await asyncio.sleep(self.config.poll_interval)
        raise RpcError(
            ErrorCode.RPC_ERROR,
            f"tx {tx_hash} not validated after {self.config.max_polls} polls",
        )

    async def submit_and_wait(self, tx_json: Dict[str, Any], secret: str) -> Dict[str, Any]:
        """Submit and wait for validation; returns the final result and metadata."""
        result = await self.submit(tx_json, secret)
        engine_result = str(result.get("engine_result", ""))
        if engine_result.startswith(NOT_APPLIED):
            raise RpcError(
                ErrorCode.RPC_ERROR,
                f"submit: {engine_result}: {result.get('engine_result_message', '')}",
                response=result,
            )
        tx_hash = (result.get("tx_json") or {}).get("hash")
        if not tx_hash:
            raise RpcError(ErrorCode.RPC_ERROR, "submit: response has no tx hash", response=result)
        return await self.wait_for_validation(tx_hash)

    async def create_contract(self, tx_json: Dict[str, Any], secret: str) -> Dict[str, Any]:
        """Submit a ContractCreate; returns ``{"id", "account", "hash"}`` of the new contract."""
        final = await self.submit_and_wait(tx_json, secret)
        if final["engine_result"] != "tesSUCCESS":
            raise RpcError(
                ErrorCode.RPC_ERROR,
                f"ContractCreate failed: {final['engine_result']}",
                response=final,
            )
        contract = created_contract(final["meta"])
        contract["hash"] = final["hash"]
        return contract


def created_contract(meta: Dict[str, Any]) -> Dict[str, Any]:
    """Id and account of the Contract entry created in ``meta``."""
    for node in meta.get("AffectedNodes", []):
        created = node.get("CreatedNode")
        if created and created.get("LedgerEntryType") == CONTRACT_ENTRY_TYPE:
            fields = created.get("NewFields") or {}
            return {"id": created.get("LedgerIndex"), "account": fields.get("ContractAccount")}
    raise RpcError(ErrorCode.RPC_ERROR, "metadata has no created Contract entry", response=meta)
