"""Calculator instruction and accumulator record codecs.

Instruction payload (8 bytes, little-endian)::

    [u32 operation][u32 operand]

Account record (4 bytes, little-endian)::

    [u32 value]
"""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .constants import U32_MAX
from .errors import InvalidInstructionError

INSTRUCTION_LAYOUT = struct.Struct("<II")
INSTRUCTION_SIZE = INSTRUCTION_LAYOUT.size

ACCUMULATOR_LAYOUT = struct.Struct("<I")
ACCUMULATOR_SIZE = ACCUMULATOR_LAYOUT.size


class Operation(IntEnum):
    RESET = 0
    ADD = 1
    SUBTRACT = 2
    MULTIPLY = 3


_DESCRIPTIONS = {
    Operation.RESET: "reset the example.",
    Operation.ADD: "add: {operand}",
    Operation.SUBTRACT: "subtract: {operand}",
    Operation.MULTIPLY: "multiply by: {operand}",
}


def to_operation(code: int) -> Operation:
    try:
        return Operation(code)
    except ValueError as exc:
        raise InvalidInstructionError(f"Unknown operation code: {code}") from exc


def parse_operation(text: str) -> Operation:
    """Accept an operation name (any case) or its numeric code."""
    value = text.strip()
    if value.isdigit():
        return to_operation(int(value))
    try:
        return Operation[value.upper()]
    except KeyError as exc:
        names = ", ".join(op.name.lower() for op in Operation)
        raise InvalidInstructionError(f"Unknown operation {text!r} (expected one of {names})") from exc


def describe(operation: int, operand: int) -> str:
    return _DESCRIPTIONS[to_operation(operation)].format(operand=operand)


def check_operand(operand: int) -> int:
    if isinstance(operand, bool) or not isinstance(operand, int):
        raise InvalidInstructionError(f"Operand must be an integer, got {operand!r}")
    if operand < 0 or operand > U32_MAX:
        raise InvalidInstructionError(f"Operand {operand} does not fit in u32")
    return operand


def encode(operation: int, operand: int) -> bytes:
    op = to_operation(operation)
    return INSTRUCTION_LAYOUT.pack(int(op), check_operand(operand))


def decode(data: bytes) -> Tuple[Operation, int]:
    if len(data) != INSTRUCTION_SIZE:
        raise InvalidInstructionError(
            f"Instruction payload is {len(data)} bytes; expected {INSTRUCTION_SIZE}"
        )
    code, operand = INSTRUCTION_LAYOUT.unpack_from(data, 0)
    return to_operation(code), operand


def decode_accumulator(data: bytes) -> int:
    if len(data) < ACCUMULATOR_SIZE:
        raise InvalidInstructionError(
            f"Account data is {len(data)} bytes; expected {ACCUMULATOR_SIZE}"
        )
    (value,) = ACCUMULATOR_LAYOUT.unpack_from(data, 0)
    return value


def build_instruction(
    program_id: Pubkey,
    client_address: Pubkey,
    operation: int,
    operand: int,
) -> Instruction:
    data = encode(operation, operand)
    metas = [AccountMeta(client_address, False, True)]
    return Instruction(program_id, data, metas)
