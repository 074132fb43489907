"""CLI entrypoint for the calculator client."""

from __future__ import annotations

import argparse
import os
import sys

from .accounts import derive_client_address
from .config import ClientConfig, resolve_config
from .errors import CalculatorClientError
from .instruction import check_operand, describe, encode, parse_operation
from .keys import load_keypair, resolve_program_id
from .runner import run
from .session import RemoteSession


def _config_from_args(args: argparse.Namespace) -> ClientConfig:
    return resolve_config(
        config_path=args.config,
        rpc_url=args.url,
        keypair=args.keypair,
        program_keypair=args.program_keypair,
        program_id=args.program_id,
        seed=args.seed,
        lamports=args.lamports,
        timeout=args.timeout,
    )


def _cmd_run(args: argparse.Namespace) -> int:
    operation = parse_operation(args.operation)
    check_operand(args.operand)
    cfg = _config_from_args(args)
    result = run(cfg, operation, args.operand)
    if not result.ok:
        print(f"Run failed during {result.failed_stage.value}: {result.error}")
        return 1
    print("Run complete")
    return 0


def _cmd_address(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    keypair = load_keypair(cfg.keypair_path)
    program_id = resolve_program_id(cfg.program_id, cfg.program_keypair_path)
    address = derive_client_address(keypair.pubkey(), cfg.seed, program_id)
    print("Client account:")
    print(f"  base: {keypair.pubkey()}")
    print(f"  seed: {cfg.seed}")
    print(f"  program_id: {program_id}")
    print(f"  address: {address}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    keypair = load_keypair(cfg.keypair_path)
    program_id = resolve_program_id(cfg.program_id, cfg.program_keypair_path)
    address = derive_client_address(keypair.pubkey(), cfg.seed, program_id)
    session = RemoteSession(cfg.rpc_url, cfg.timeout)
    value = session.fetch_value(address)
    print(f"Account: {address}")
    print(f"Value: {value}")
    return 0


def _cmd_encode(args: argparse.Namespace) -> int:
    operation = parse_operation(args.operation)
    data = encode(operation, args.operand)
    print(describe(operation, args.operand))
    print(data.hex(" "))
    return 0


def _add_connection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="Project file (default: ./calculator.toml if present)")
    p.add_argument("--url", help="RPC URL or cluster name (localnet, devnet, mainnet)")
    p.add_argument("--keypair", help="Signer keypair file")
    p.add_argument("--program-keypair", help="Program deploy keypair file")
    p.add_argument("--program-id", help="Program id (overrides --program-keypair)")
    p.add_argument("--seed", help="Client account seed")
    p.add_argument("--lamports", type=int, help="Lamports to fund a new client account with")
    p.add_argument("--timeout", type=float, help="RPC timeout in seconds")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog=os.path.basename(sys.argv[0]))
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Provision the client account and send one instruction")
    p_run.add_argument("operation", nargs="?", default="add", help="reset, add, subtract or multiply")
    p_run.add_argument("operand", nargs="?", type=int, default=2, help="u32 operand")
    _add_connection_args(p_run)
    p_run.set_defaults(func=_cmd_run)

    p_address = sub.add_parser("address", help="Print the derived client account address")
    _add_connection_args(p_address)
    p_address.set_defaults(func=_cmd_address)

    p_show = sub.add_parser("show", help="Print the client account's current value")
    _add_connection_args(p_show)
    p_show.set_defaults(func=_cmd_show)

    p_encode = sub.add_parser("encode", help="Print the instruction payload for an operation")
    p_encode.add_argument("operation", help="reset, add, subtract or multiply")
    p_encode.add_argument("operand", type=int, help="u32 operand")
    p_encode.set_defaults(func=_cmd_encode)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except CalculatorClientError as exc:
        print(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
