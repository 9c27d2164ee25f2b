import logging as lg
from typing import List, Tuple, Dict, Any

from evminst.common.evmconf import LABEL_REF_WIDTH
import evminst.common.ops as ops
import evminst.common.inst as inst

Tokens = List[Any]


class AsmError(Exception):
    pass


def parse_int(literal: str) -> int:
    if literal.lower().startswith('0x'):
        return int(literal, 16)

    return int(literal)


def parse_hex_bytes(literal: str) -> bytes:
    digits = literal[2:]

    if len(digits) % 2:
        digits = '0' + digits

    return bytes.fromhex(digits)


class FPP:
    ''' First pass processor '''
    cmd_list: List[Tuple[str, inst.Inst | Tuple[int, str]]]
    label_dict: Dict[str, int]

    def __init__(self):
        self.cmd_list = list()
        self.offset = 0
        self.namespace = '<global>'
        self.label_dict = dict()

    def get_qualified_name(self, name: str, namespace: str | None = None):
        if namespace is None:
            namespace = self.namespace

        return namespace + '::' + name

    def resolve_name(self, tokens: Tokens):
        if len(tokens) == 1:
            # Unqualified
            return self.get_qualified_name(tokens[0])
        else:
            # Qualified
            return self.get_qualified_name(tokens[1], tokens[0])  # name, namespace

    def issue(self, instruction: inst.Inst):
        width = inst.inst_size(instruction)
        lg.debug(f'Issuing {inst.mnemonic(instruction)} @ 0x{self.offset:X}')
        self.cmd_list.append(('inst', instruction))
        self.offset += width

    # Handlers
    def issue_fixed(self, member):
        self.issue(inst.wrap(member))

    def issue_dup(self, n: int):
        self.issue(inst.Dup(n))

    def issue_swap(self, n: int):
        self.issue(inst.Swap(n))

    def issue_byte(self, tokens: Tokens):
        self.issue(inst.Unknown(parse_int(tokens[0])))

    def issue_push(self, tokens: Tokens):
        keyword = str(tokens[0])
        width = int(keyword[4:]) if len(keyword) > 4 else None
        operand = tokens[1]

        if not isinstance(operand, str):
            self.on_ref(LABEL_REF_WIDTH if width is None else width, list(operand))
            return

        if width is None and operand.lower().startswith('0x'):
            self.issue(inst.Push(parse_hex_bytes(operand)))
        else:
            self.issue(inst.push_int(parse_int(operand), width))

    def on_label(self, tokens: Tokens):
        qlabelname = self.get_qualified_name(tokens[0])

        if qlabelname in self.label_dict:
            raise AsmError(f'Duplicate label {qlabelname}')

        self.label_dict[qlabelname] = self.offset
        lg.debug(f'Label {qlabelname} @ 0x{self.offset:X}')

    def on_ref(self, width: int, refname: Tokens):
        ops.push_code(width)
        labelname = self.resolve_name(refname)

        lg.debug(f'Ref {labelname}')

        self.cmd_list.append(('ref', (width, labelname)))
        self.offset += 1 + width  # opcode and placeholder bytes

    def on_fail(self, tokens: Tokens):
        raise AsmError(f'Unknown command {tokens[0]}')
