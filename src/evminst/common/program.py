''' Program measurement, serialization and byte-offset navigation '''

from typing import Any, List, Sequence, Tuple, TypeAlias

import evminst.common.ops as ops
from evminst.common.inst import Inst, Annotation, PcInst, Push, inst_code, inst_size


Program: TypeAlias = Sequence[Inst]


class MalformedOffset(Exception):
    offset: int

    def __init__(self, offset: int, reason: str):
        super().__init__(f'Malformed offset {offset}: {reason}')
        self.offset = offset


def program_size(program: Program) -> int:
    return sum(inst_size(inst) for inst in program)


def program_code(program: Program) -> bytes:
    return b''.join(inst_code(inst) for inst in program)


def drop_bytes(program: Program, budget: int) -> Program:
    '''
    Returns the part of the program that starts `budget` bytes
    into its serialized form. Annotations are zero width, so the ones
    located right at the offset are kept.
    '''

    if budget < 0:
        raise MalformedOffset(budget, 'negative offset')

    left = budget
    index = 0

    while left > 0:
        if index == len(program):
            raise MalformedOffset(budget, 'past the end of the program')

        left -= inst_size(program[index])
        index += 1

        if left < 0:
            raise MalformedOffset(budget, 'inside an instruction')

    if index == 0:
        return program

    return program[index:]


def _skip_annotations(program: Program) -> Tuple[List[Annotation], Program]:
    annotations: List[Annotation] = []
    index = 0

    while index < len(program) and isinstance(program[index], Annotation):
        annotations.append(program[index])  # type: ignore
        index += 1

    return (annotations, program[index:])


def inst_at(program: Program, offset: int) -> Inst | None:
    (_, rest) = _skip_annotations(drop_bytes(program, offset))
    return rest[0] if rest else None


def annotations_at(program: Program, offset: int) -> List[Annotation]:
    (annotations, _) = _skip_annotations(drop_bytes(program, offset))
    return annotations


def check_annotations(program: Program, offset: int, state: Any) -> bool:
    return all(a.holds(state) for a in annotations_at(program, offset))


def is_jumpdest(program: Program, offset: int) -> bool:
    try:
        inst = inst_at(program, offset)
    except (MalformedOffset, ops.EncodingError):
        return False

    return inst == PcInst(ops.Pc.JUMPDEST)


def listing(program: Program) -> List[Tuple[int, Inst]]:
    offset = 0
    rows = []

    for inst in program:
        rows.append((offset, inst))
        offset += inst_size(inst)

    return rows


def static_jumps(program: Program) -> List[Tuple[int, int]]:
    '''
    Collects (jump offset, target) for every JUMP/JUMPI whose target is
    pushed by the instruction right before it.
    '''

    jumps = []
    pushed: int | None = None

    for offset, inst in listing(program):
        if isinstance(inst, Annotation):
            continue

        if isinstance(inst, PcInst) and inst.inst in (ops.Pc.JUMP, ops.Pc.JUMPI):
            if pushed is not None:
                jumps.append((offset, pushed))

        pushed = int.from_bytes(inst.data, 'big') if isinstance(inst, Push) else None

    return jumps
