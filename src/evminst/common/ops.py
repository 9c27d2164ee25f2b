''' Opcode families and their byte encodings '''

from enum import Enum, unique
from typing import Dict, List, Tuple, Type

from evminst.common.evmconf import (
    PUSH_BASE, DUP_BASE, SWAP_BASE,
    MIN_PUSH_BYTES, MAX_PUSH_BYTES,
    MIN_STACK_INDEX, MAX_STACK_INDEX
)


class EncodingError(Exception):
    pass


class InvalidParameter(EncodingError):
    pass


class InvalidImmediateLength(EncodingError):
    pass


class OpcodeCollision(EncodingError):
    pass


class UnknownMnemonic(EncodingError):
    pass


# Bitwise
@unique
class Bits(Enum):
    AND = 0x16
    OR = 0x17
    XOR = 0x18
    NOT = 0x19
    BYTE = 0x1A


# Signed arithmetic
@unique
class SArith(Enum):
    SDIV = 0x05
    SMOD = 0x07
    SIGNEXTEND = 0x0B
    SLT = 0x12
    SGT = 0x13


# Unsigned arithmetic
@unique
class Arith(Enum):
    ADD = 0x01
    MUL = 0x02
    SUB = 0x03
    DIV = 0x04
    MOD = 0x06
    ADDMOD = 0x08
    MULMOD = 0x09
    EXP = 0x0A
    LT = 0x10
    GT = 0x11
    EQ = 0x14
    ISZERO = 0x15
    SHA3 = 0x20


# Environment and block information
@unique
class Info(Enum):
    ADDRESS = 0x30
    BALANCE = 0x31
    ORIGIN = 0x32
    CALLER = 0x33
    CALLVALUE = 0x34
    CALLDATASIZE = 0x36
    CODESIZE = 0x38
    GASPRICE = 0x3A
    EXTCODESIZE = 0x3B
    BLOCKHASH = 0x40
    COINBASE = 0x41
    TIMESTAMP = 0x42
    NUMBER = 0x43
    DIFFICULTY = 0x44
    GASLIMIT = 0x45
    GAS = 0x5A


@unique
class Memory(Enum):
    CALLDATACOPY = 0x37
    CODECOPY = 0x39
    EXTCODECOPY = 0x3C
    MLOAD = 0x51
    MSTORE = 0x52
    MSTORE8 = 0x53
    MSIZE = 0x59


@unique
class Storage(Enum):
    SLOAD = 0x54
    SSTORE = 0x55


# Program counter and control flow
@unique
class Pc(Enum):
    JUMP = 0x56
    JUMPI = 0x57
    PC = 0x58
    JUMPDEST = 0x5B


# Fixed-width stack operations, PUSH is modelled separately
@unique
class Stack(Enum):
    CALLDATALOAD = 0x35
    POP = 0x50


@unique
class Log(Enum):
    LOG0 = 0xA0
    LOG1 = 0xA1
    LOG2 = 0xA2
    LOG3 = 0xA3
    LOG4 = 0xA4


@unique
class Misc(Enum):
    STOP = 0x00
    CREATE = 0xF0
    CALL = 0xF1
    CALLCODE = 0xF2
    RETURN = 0xF3
    DELEGATECALL = 0xF4
    SUICIDE = 0xFF


FAMILIES: Tuple[Type[Enum], ...] = (
    Bits, SArith, Arith, Info, Memory, Storage, Pc, Stack, Log, Misc
)


def _family_code(family: Type[Enum], inst: Enum) -> int:
    if not isinstance(inst, family):
        raise TypeError(f'{inst!r} is not a {family.__name__} instruction')

    return inst.value


def bits_code(inst: Bits) -> int:
    return _family_code(Bits, inst)


def sarith_code(inst: SArith) -> int:
    return _family_code(SArith, inst)


def arith_code(inst: Arith) -> int:
    return _family_code(Arith, inst)


def info_code(inst: Info) -> int:
    return _family_code(Info, inst)


def memory_code(inst: Memory) -> int:
    return _family_code(Memory, inst)


def storage_code(inst: Storage) -> int:
    return _family_code(Storage, inst)


def pc_code(inst: Pc) -> int:
    return _family_code(Pc, inst)


def stack_code(inst: Stack) -> int:
    return _family_code(Stack, inst)


def log_code(inst: Log) -> int:
    return _family_code(Log, inst)


def misc_code(inst: Misc) -> int:
    return _family_code(Misc, inst)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_stack_index(n: int):
    if not _is_int(n) or n < MIN_STACK_INDEX or n > MAX_STACK_INDEX:
        raise InvalidParameter(
            f'Stack index {n!r} out of range {MIN_STACK_INDEX}..{MAX_STACK_INDEX}'
        )


def dup_code(n: int) -> int:
    validate_stack_index(n)
    return DUP_BASE + n


def swap_code(n: int) -> int:
    validate_stack_index(n)
    return SWAP_BASE + n


def push_code(length: int) -> int:
    if not _is_int(length) or length < MIN_PUSH_BYTES or length > MAX_PUSH_BYTES:
        raise InvalidImmediateLength(
            f'Push immediate of {length!r} bytes, need {MIN_PUSH_BYTES}..{MAX_PUSH_BYTES}'
        )

    return PUSH_BASE + length


def all_codes() -> List[Tuple[str, int]]:
    # __members__ also lists aliases, i.e. duplicate values inside a family
    codes = [
        (name, member.value)
        for family in FAMILIES
        for name, member in family.__members__.items()
    ]
    stack_range = range(MIN_STACK_INDEX, MAX_STACK_INDEX + 1)
    codes.extend((f'DUP{n}', dup_code(n)) for n in stack_range)
    codes.extend((f'SWAP{n}', swap_code(n)) for n in stack_range)
    push_range = range(MIN_PUSH_BYTES, MAX_PUSH_BYTES + 1)
    codes.extend((f'PUSH{n}', push_code(n)) for n in push_range)
    return codes


def check_distinct():
    seen: Dict[int, str] = dict()

    for name, code in all_codes():
        if code in seen:
            raise OpcodeCollision(f'{name} and {seen[code]} share opcode 0x{code:02X}')

        seen[code] = name


def _mnemonic_table() -> Dict[str, Enum]:
    table: Dict[str, Enum] = dict()

    for family in FAMILIES:
        for name, member in family.__members__.items():
            if name in table:
                raise OpcodeCollision(f'Mnemonic {name} defined twice')

            table[name] = member

    return table


MNEMONICS = _mnemonic_table()


def lookup_mnemonic(name: str) -> Enum:
    try:
        return MNEMONICS[name.upper()]
    except KeyError:
        raise UnknownMnemonic(f'Unknown mnemonic {name}') from None


check_distinct()
