"""RPC session against one ledger node."""

from __future__ import annotations

from typing import Optional, Sequence

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts
from solders.account import Account
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .constants import COMMITMENT, DEFAULT_TIMEOUT
from .errors import InvalidInstructionError, RemoteError, RemoteTimeoutError
from .instruction import decode_accumulator


def _remote_error(action: str, exc: Exception) -> RemoteError:
    if isinstance(exc, (UnconfirmedTxError, TransactionExpiredBlockheightExceededError)):
        return RemoteTimeoutError(f"{action} timed out: {exc}")
    if isinstance(exc, SolanaRpcException) and isinstance(exc.__cause__, httpx.TimeoutException):
        return RemoteTimeoutError(f"{action} timed out: {exc}")
    return RemoteError(f"{action} failed: {exc}")


class RemoteSession:
    """One connection to one node endpoint.

    Every call blocks until the node answers. Nothing is retried; a request
    that exceeds ``timeout`` seconds, or a transaction whose blockhash expires
    before confirmation, raises ``RemoteTimeoutError``.
    """

    def __init__(self, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.rpc_url = rpc_url
        self.client = Client(rpc_url, commitment=COMMITMENT, timeout=timeout)

    def fetch_account(self, address: Pubkey) -> Optional[Account]:
        try:
            return self.client.get_account_info(address, commitment=COMMITMENT).value
        except (RPCException, SolanaRpcException) as exc:
            raise _remote_error(f"getAccountInfo {address}", exc) from exc

    def fetch_value(self, address: Pubkey) -> int:
        info = self.fetch_account(address)
        if info is None:
            raise RemoteError(f"Account not found: {address}")
        try:
            return decode_accumulator(bytes(info.data))
        except InvalidInstructionError as exc:
            raise RemoteError(f"Account {address} does not hold an accumulator: {exc}") from exc

    def submit(self, instructions: Sequence[Instruction], signers: Sequence[Keypair]) -> Signature:
        """Sign, send and confirm one transaction paid by the first signer."""
        if not instructions:
            raise ValueError("transaction needs at least one instruction")
        if not signers:
            raise ValueError("transaction needs at least one signer")
        try:
            latest = self.client.get_latest_blockhash(commitment=COMMITMENT).value
            tx = Transaction.new_with_payer(list(instructions), signers[0].pubkey())
            tx.sign(list(signers), latest.blockhash)
            sig = self.client.send_raw_transaction(
                bytes(tx),
                opts=TxOpts(skip_preflight=False, preflight_commitment=COMMITMENT),
            ).value
            resp = self.client.confirm_transaction(
                sig,
                commitment=COMMITMENT,
                last_valid_block_height=latest.last_valid_block_height,
            )
        except (
            RPCException,
            SolanaRpcException,
            UnconfirmedTxError,
            TransactionExpiredBlockheightExceededError,
        ) as exc:
            raise _remote_error("sendTransaction", exc) from exc
        statuses = resp.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise RemoteError(f"Transaction {sig} was rejected: {status.err}")
        return sig
