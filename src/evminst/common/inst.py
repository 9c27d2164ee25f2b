''' Unified instruction type and the instruction encoder '''

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, TypeAlias

import evminst.common.ops as ops
from evminst.common.evmconf import BYTE_MAX


JSON: TypeAlias = Dict[str, Any]
Predicate: TypeAlias = Callable[[Any], bool]


class Instruction:
    def json(self) -> JSON:
        raise NotImplementedError()


def _to_bytes(data: Iterable[int]) -> bytes:
    # bytes(n) would build n zero bytes
    if isinstance(data, int):
        raise ops.InvalidParameter(f'Immediate data must be a byte sequence, got {data!r}')

    try:
        return bytes(data)
    except (ValueError, TypeError) as e:
        raise ops.InvalidParameter(f'Invalid immediate data {data!r}: {e}') from None


@dataclass(frozen=True)
class Unknown(Instruction):
    byte: int

    def __post_init__(self):
        if isinstance(self.byte, bool) or not isinstance(self.byte, int) \
                or self.byte < 0 or self.byte > BYTE_MAX:
            raise ops.InvalidParameter(f'Unknown opcode {self.byte!r} is not a byte')

    def json(self):
        return {'Class': 'Unknown', 'Byte': self.byte}


@dataclass(frozen=True)
class FamilyInst(Instruction):
    ''' Wraps a member of one of the fixed opcode families '''

    def json(self):
        inst = getattr(self, 'inst')
        return {'Class': self.__class__.__name__, 'Op': inst.name}


@dataclass(frozen=True)
class BitInst(FamilyInst):
    inst: ops.Bits


@dataclass(frozen=True)
class SArithInst(FamilyInst):
    inst: ops.SArith


@dataclass(frozen=True)
class ArithInst(FamilyInst):
    inst: ops.Arith


@dataclass(frozen=True)
class InfoInst(FamilyInst):
    inst: ops.Info


@dataclass(frozen=True)
class MemoryInst(FamilyInst):
    inst: ops.Memory


@dataclass(frozen=True)
class StorageInst(FamilyInst):
    inst: ops.Storage


@dataclass(frozen=True)
class PcInst(FamilyInst):
    inst: ops.Pc


@dataclass(frozen=True)
class StackInst(FamilyInst):
    inst: ops.Stack


@dataclass(frozen=True)
class LogInst(FamilyInst):
    inst: ops.Log


@dataclass(frozen=True)
class MiscInst(FamilyInst):
    inst: ops.Misc


@dataclass(frozen=True)
class Dup(Instruction):
    n: int

    def json(self):
        return {'Class': 'Dup', 'N': self.n}


@dataclass(frozen=True)
class Swap(Instruction):
    n: int

    def json(self):
        return {'Class': 'Swap', 'N': self.n}


@dataclass(frozen=True)
class Push(Instruction):
    data: bytes

    def __post_init__(self):
        # Length is checked by the encoder
        object.__setattr__(self, 'data', _to_bytes(self.data))

    def json(self):
        return {'Class': 'Push', 'Data': self.data.hex()}


@dataclass(frozen=True)
class Annotation(Instruction):
    ''' Zero-width assertion over an opaque machine state '''
    predicate: Predicate

    def holds(self, state: Any) -> bool:
        return bool(self.predicate(state))

    def json(self):
        name = getattr(self.predicate, '__name__', repr(self.predicate))
        return {'Class': 'Annotation', 'Predicate': name}


Inst: TypeAlias = (
    Unknown | BitInst | SArithInst | ArithInst | InfoInst | Dup
    | MemoryInst | StorageInst | PcInst | StackInst | Push | Swap
    | LogInst | MiscInst | Annotation
)


FAMILY_ENCODERS: Dict[type, Callable[[Any], int]] = {
    BitInst: ops.bits_code,
    SArithInst: ops.sarith_code,
    ArithInst: ops.arith_code,
    InfoInst: ops.info_code,
    MemoryInst: ops.memory_code,
    StorageInst: ops.storage_code,
    PcInst: ops.pc_code,
    StackInst: ops.stack_code,
    LogInst: ops.log_code,
    MiscInst: ops.misc_code,
}


def inst_code(inst: Inst) -> bytes:
    if isinstance(inst, Annotation):
        return b''

    if isinstance(inst, Unknown):
        return bytes([inst.byte])

    if isinstance(inst, Push):
        return bytes([ops.push_code(len(inst.data))]) + inst.data

    if isinstance(inst, Dup):
        return bytes([ops.dup_code(inst.n)])

    if isinstance(inst, Swap):
        return bytes([ops.swap_code(inst.n)])

    encoder = FAMILY_ENCODERS.get(type(inst))

    if encoder is None:
        raise TypeError(f'Not an instruction: {inst!r}')

    return bytes([encoder(inst.inst)])  # type: ignore


def inst_size(inst: Inst) -> int:
    return len(inst_code(inst))


def mnemonic(inst: Inst) -> str:
    if isinstance(inst, Annotation):
        return 'ANNOTATION'

    if isinstance(inst, Unknown):
        return f'UNKNOWN(0x{inst.byte:02x})'

    if isinstance(inst, Push):
        return f'PUSH{len(inst.data)}'

    if isinstance(inst, Dup):
        return f'DUP{inst.n}'

    if isinstance(inst, Swap):
        return f'SWAP{inst.n}'

    if isinstance(inst, FamilyInst):
        return getattr(inst, 'inst').name

    raise TypeError(f'Not an instruction: {inst!r}')


_WRAPPERS: Dict[type, type] = {
    ops.Bits: BitInst,
    ops.SArith: SArithInst,
    ops.Arith: ArithInst,
    ops.Info: InfoInst,
    ops.Memory: MemoryInst,
    ops.Storage: StorageInst,
    ops.Pc: PcInst,
    ops.Stack: StackInst,
    ops.Log: LogInst,
    ops.Misc: MiscInst,
}


def wrap(member) -> Inst:
    ''' Lifts a family enum member (e.g. ops.Pc.JUMP) into an instruction '''
    wrapper = _WRAPPERS.get(type(member))

    if wrapper is None:
        raise TypeError(f'{member!r} is not an opcode family member')

    return wrapper(member)


def push_int(value: int, width: int | None = None) -> Push:
    ''' Big-endian push of a non-negative integer, minimal width by default '''
    if value < 0:
        raise ops.InvalidParameter(f'Cannot push negative value {value}')

    if width is None:
        width = max(1, (value.bit_length() + 7) // 8)

    ops.push_code(width)

    try:
        return Push(value.to_bytes(width, 'big'))
    except OverflowError:
        raise ops.InvalidImmediateLength(
            f'Value {value} does not fit in {width} bytes'
        ) from None
