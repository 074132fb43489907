"""Keypair and program id loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .constants import KEYPAIR_LEN
from .errors import CredentialLoadError, ProgramResolutionError


def _read_key_bytes(path: Path) -> bytes:
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise CredentialLoadError(f"Keypair file not found: {path}") from exc
    except OSError as exc:
        raise CredentialLoadError(f"Unable to read keypair file {path}: {exc}") from exc
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CredentialLoadError(f"Keypair file is not a JSON array: {path}") from exc
    if not isinstance(raw, list):
        raise CredentialLoadError(f"Keypair file is not a JSON array: {path}")
    if len(raw) != KEYPAIR_LEN:
        raise CredentialLoadError(
            f"Keypair file {path} holds {len(raw)} bytes; expected {KEYPAIR_LEN}"
        )
    values: List[int] = []
    for item in raw:
        # bool is an int subclass but never a key byte
        if not isinstance(item, int) or isinstance(item, bool) or not 0 <= item <= 0xFF:
            raise CredentialLoadError(f"Keypair file {path} contains a non-byte value: {item!r}")
        values.append(item)
    return bytes(values)


def load_keypair(path: str | Path) -> Keypair:
    """Load a keypair from a JSON byte-array file as written by solana-keygen."""
    resolved = Path(path).expanduser()
    secret = _read_key_bytes(resolved)
    try:
        return Keypair.from_bytes(secret)
    except ValueError as exc:
        raise CredentialLoadError(f"Keypair file {resolved} is not a valid keypair: {exc}") from exc


def resolve_program_id(
    program_id: Optional[str] = None,
    program_keypair_path: str | Path | None = None,
) -> Pubkey:
    """Resolve the program id from a base58 literal, else from the deploy keypair.

    Only the public half of the program keypair is used.
    """
    if program_id:
        try:
            return Pubkey.from_string(program_id)
        except ValueError as exc:
            raise ProgramResolutionError(f"Invalid program id {program_id!r}: {exc}") from exc
    if program_keypair_path is None:
        raise ProgramResolutionError("No program id or program keypair configured")
    try:
        return load_keypair(program_keypair_path).pubkey()
    except CredentialLoadError as exc:
        raise ProgramResolutionError(f"Unable to resolve program id: {exc}") from exc
