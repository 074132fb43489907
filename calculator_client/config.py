"""Configuration resolution for the calculator client.

Values come from command-line overrides, then the project TOML file, then the
Solana CLI config, then built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from .constants import (
    CLUSTER_URLS,
    DEFAULT_FUNDING_LAMPORTS,
    DEFAULT_KEYPAIR_PATH,
    DEFAULT_PROGRAM_KEYPAIR_PATH,
    DEFAULT_PROJECT_FILE,
    DEFAULT_RPC_URL,
    DEFAULT_SEED,
    DEFAULT_TIMEOUT,
    MAX_SEED_LEN,
)
from .errors import CredentialLoadError


@dataclass(frozen=True)
class ClientConfig:
    """Resolved settings for one run."""

    rpc_url: str
    keypair_path: str
    program_keypair_path: Optional[str]
    program_id: Optional[str]
    seed: str
    lamports: int
    timeout: float


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _table(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CredentialLoadError(f"[{key}] must be a table")
    return value


def load_solana_cli_config() -> Dict[str, str]:
    path = os.environ.get("SOLANA_CONFIG") or os.environ.get("SOLANA_CONFIG_FILE")
    if path:
        cfg_path = Path(path).expanduser()
    else:
        cfg_path = Path.home() / ".config" / "solana" / "cli" / "config.yml"
    try:
        text = cfg_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return {}
    cfg: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("---"):
            continue
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip().strip("\"'")
        if key:
            cfg[key] = value
    return cfg


def load_project_file(path: str | Path, required: bool = False) -> Dict[str, Any]:
    project_path = Path(path).expanduser()
    if not project_path.exists():
        if required:
            raise CredentialLoadError(f"Config file not found: {project_path}")
        return {}
    try:
        return tomllib.loads(project_path.read_text())
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise CredentialLoadError(f"Config file {project_path} is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise CredentialLoadError(f"Unable to read config file {project_path}: {exc}") from exc


def resolve_project_path(project_path: str | Path, raw_path: str) -> str:
    candidate = Path(raw_path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((Path(project_path).resolve().parent / candidate).resolve())


def resolve_rpc_url(value: str) -> str:
    """Map a cluster shorthand to its endpoint; pass URLs through."""
    return CLUSTER_URLS.get(value.strip().lower(), value.strip())


def validate_seed(seed: str) -> str:
    if not seed:
        raise CredentialLoadError("account seed must not be empty")
    if len(seed.encode("utf-8")) > MAX_SEED_LEN:
        raise CredentialLoadError(f"account seed must be at most {MAX_SEED_LEN} bytes: {seed!r}")
    return seed


def _int_setting(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CredentialLoadError(f"{name} must be an integer")
    if value < 0:
        raise CredentialLoadError(f"{name} must be non-negative")
    return value


def _timeout_setting(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CredentialLoadError(f"{name} must be a number of seconds")
    if value <= 0:
        raise CredentialLoadError(f"{name} must be positive")
    return float(value)


def resolve_config(
    config_path: Optional[str] = None,
    rpc_url: Optional[str] = None,
    keypair: Optional[str] = None,
    program_keypair: Optional[str] = None,
    program_id: Optional[str] = None,
    seed: Optional[str] = None,
    lamports: Optional[int] = None,
    timeout: Optional[float] = None,
) -> ClientConfig:
    project_path = config_path or DEFAULT_PROJECT_FILE
    project = load_project_file(project_path, required=config_path is not None)
    cluster = _table(project, "cluster")
    program = _table(project, "program")
    account = _table(project, "account")
    solana_cfg = load_solana_cli_config()

    url = (
        _clean(rpc_url)
        or _clean(cluster.get("rpc_url"))
        or _clean(solana_cfg.get("json_rpc_url"))
        or DEFAULT_RPC_URL
    )

    keypair_path = _clean(keypair)
    if keypair_path is None and _clean(cluster.get("payer")):
        keypair_path = resolve_project_path(project_path, cluster["payer"])
    if keypair_path is None:
        keypair_path = _clean(solana_cfg.get("keypair_path")) or DEFAULT_KEYPAIR_PATH
    keypair_path = str(Path(keypair_path).expanduser())

    program_keypair_path = _clean(program_keypair)
    if program_keypair_path is None and _clean(program.get("keypair")):
        program_keypair_path = resolve_project_path(project_path, program["keypair"])
    if program_keypair_path is None:
        program_keypair_path = DEFAULT_PROGRAM_KEYPAIR_PATH

    account_seed = seed if seed is not None else account.get("seed", DEFAULT_SEED)
    if not isinstance(account_seed, str):
        raise CredentialLoadError("account.seed must be a string")

    if lamports is None:
        lamports = account.get("lamports", DEFAULT_FUNDING_LAMPORTS)
    if timeout is None:
        timeout = cluster.get("timeout", DEFAULT_TIMEOUT)

    return ClientConfig(
        rpc_url=resolve_rpc_url(url),
        keypair_path=keypair_path,
        program_keypair_path=program_keypair_path,
        program_id=_clean(program_id) or _clean(program.get("program_id")),
        seed=validate_seed(account_seed),
        lamports=_int_setting(lamports, "account.lamports"),
        timeout=_timeout_setting(timeout, "cluster.timeout"),
    )
