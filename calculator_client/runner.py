"""End-to-end calculator run.

A run is a fixed sequence of stages. Each stage takes the run context and
returns an updated copy; the first stage to fail ends the run. Nothing is
rolled back: an account provisioned before a failed submission stays
provisioned.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Tuple

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from .accounts import ClientAccount, ensure_provisioned
from .config import ClientConfig
from .errors import CalculatorClientError
from .instruction import ACCUMULATOR_SIZE, Operation, build_instruction, describe
from .keys import load_keypair, resolve_program_id
from .session import RemoteSession


class Stage(str, Enum):
    CONNECT = "connect"
    LOAD_IDENTITY = "load identity"
    RESOLVE_PROGRAM = "resolve program"
    PROVISION_ACCOUNT = "provision account"
    SUBMIT_INSTRUCTION = "submit instruction"


class RunState(str, Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    IDENTITY_LOADED = "identity loaded"
    PROGRAM_RESOLVED = "program resolved"
    ACCOUNT_READY = "account ready"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class RunContext:
    """Everything one run has resolved so far."""

    config: ClientConfig
    operation: Operation
    operand: int
    state: RunState = RunState.IDLE
    session: Optional[RemoteSession] = None
    keypair: Optional[Keypair] = None
    program_id: Optional[Pubkey] = None
    account: Optional[ClientAccount] = None
    signature: Optional[Signature] = None


@dataclass(frozen=True)
class RunResult:
    context: RunContext
    failed_stage: Optional[Stage] = None
    error: Optional[CalculatorClientError] = None

    @property
    def ok(self) -> bool:
        return self.context.state is RunState.SUCCESS

    @property
    def state(self) -> RunState:
        return self.context.state


Step = Callable[[RunContext], RunContext]
SessionFactory = Callable[[str, float], RemoteSession]


def connect(ctx: RunContext, session_factory: SessionFactory = RemoteSession) -> RunContext:
    session = session_factory(ctx.config.rpc_url, ctx.config.timeout)
    print(f"Connected to {ctx.config.rpc_url}")
    return replace(ctx, session=session, state=RunState.CONNECTED)


def load_identity(ctx: RunContext) -> RunContext:
    keypair = load_keypair(ctx.config.keypair_path)
    print(f"Local account loaded: {keypair.pubkey()}")
    return replace(ctx, keypair=keypair, state=RunState.IDENTITY_LOADED)


def resolve_program(ctx: RunContext) -> RunContext:
    program_id = resolve_program_id(ctx.config.program_id, ctx.config.program_keypair_path)
    print(f"Program id: {program_id}")
    return replace(ctx, program_id=program_id, state=RunState.PROGRAM_RESOLVED)


def provision_account(ctx: RunContext) -> RunContext:
    account = ensure_provisioned(
        ctx.session,
        ctx.keypair,
        ctx.config.seed,
        ctx.program_id,
        ACCUMULATOR_SIZE,
        ctx.config.lamports,
    )
    print(f"Client account (seed {ctx.config.seed!r}): {account.address}")
    return replace(ctx, account=account, state=RunState.ACCOUNT_READY)


def submit_instruction(ctx: RunContext) -> RunContext:
    ix = build_instruction(ctx.program_id, ctx.account.address, ctx.operation, ctx.operand)
    print(f"Sending instruction: {describe(ctx.operation, ctx.operand)}")
    signature = ctx.session.submit([ix], [ctx.keypair])
    print(f"Confirmed: {signature}")
    return replace(ctx, signature=signature, state=RunState.SUCCESS)


def build_pipeline(session_factory: SessionFactory = RemoteSession) -> List[Tuple[Stage, Step]]:
    return [
        (Stage.CONNECT, partial(connect, session_factory=session_factory)),
        (Stage.LOAD_IDENTITY, load_identity),
        (Stage.RESOLVE_PROGRAM, resolve_program),
        (Stage.PROVISION_ACCOUNT, provision_account),
        (Stage.SUBMIT_INSTRUCTION, submit_instruction),
    ]


def run_pipeline(ctx: RunContext, steps: List[Tuple[Stage, Step]]) -> RunResult:
    for stage, step in steps:
        try:
            ctx = step(ctx)
        except CalculatorClientError as exc:
            return RunResult(replace(ctx, state=RunState.FAILED), failed_stage=stage, error=exc)
    return RunResult(ctx)


def run(
    config: ClientConfig,
    operation: Operation,
    operand: int,
    session_factory: SessionFactory = RemoteSession,
) -> RunResult:
    ctx = RunContext(config=config, operation=operation, operand=operand)
    return run_pipeline(ctx, build_pipeline(session_factory))
