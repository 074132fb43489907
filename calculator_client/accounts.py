"""Seed-derived client account helpers."""

from __future__ import annotations

from dataclasses import dataclass

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountWithSeedParams, create_account_with_seed

from .config import validate_seed
from .session import RemoteSession


@dataclass(frozen=True)
class ClientAccount:
    address: Pubkey
    owner: Pubkey
    storage_size: int


def derive_client_address(base: Pubkey, seed: str, owner: Pubkey) -> Pubkey:
    return Pubkey.create_with_seed(base, validate_seed(seed), owner)


def create_client_account_instruction(
    base: Pubkey,
    seed: str,
    owner: Pubkey,
    storage_size: int,
    lamports: int,
) -> Instruction:
    address = derive_client_address(base, seed, owner)
    return create_account_with_seed(
        CreateAccountWithSeedParams(
            from_pubkey=base,
            to_pubkey=address,
            base=base,
            seed=seed,
            lamports=lamports,
            space=storage_size,
            owner=owner,
        )
    )


def ensure_provisioned(
    session: RemoteSession,
    base: Keypair,
    seed: str,
    owner: Pubkey,
    storage_size: int,
    lamports: int,
) -> ClientAccount:
    """Create the seed-derived account unless it already exists.

    An existing account is returned as found and no transaction is sent, so
    repeated calls with the same inputs create the account at most once.
    """
    address = derive_client_address(base.pubkey(), seed, owner)
    info = session.fetch_account(address)
    if info is not None:
        return ClientAccount(address=address, owner=info.owner, storage_size=len(info.data))

    ix = create_client_account_instruction(base.pubkey(), seed, owner, storage_size, lamports)
    session.submit([ix], [base])
    return ClientAccount(address=address, owner=owner, storage_size=storage_size)
