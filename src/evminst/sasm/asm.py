import logging as lg
from typing import List, Tuple, cast

import evminst.sasm.grammar as grammar
import evminst.common.inst as inst
from evminst.common.program import program_code
from evminst.sasm.fpp import FPP, AsmError


class CompilationItem:
    package: str | None = None
    modulename: str
    contents: str

    def __init__(self, modulename: str, contents: str):
        self.modulename = modulename
        self.contents = contents

    def namespace(self) -> str:
        if self.package is None:
            return f'{self.modulename}'

        return f'{self.package}.{self.modulename}'

    def set_package(self, package: str):
        self.package = package
        return self


def compile_items(compile_items: List[CompilationItem]) -> Tuple[inst.Inst, ...]:
    # First pass
    first_pass = FPP()

    for compile_item in compile_items:
        lg.info(f'Processing {compile_item.namespace()}')
        first_pass.namespace = compile_item.namespace()
        actions = grammar.program.parse_string(compile_item.contents, parse_all=True)

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)

    # Second pass
    program: List[inst.Inst] = []

    for (t, d) in first_pass.cmd_list:
        if t == 'inst':
            program.append(cast(inst.Inst, d))

        if t == 'ref':
            (width, labelname) = cast(Tuple[int, str], d)

            if labelname not in first_pass.label_dict:
                raise AsmError(f'Undefined label {labelname}')

            label_offset = first_pass.label_dict[labelname]
            program.append(inst.push_int(label_offset, width))

    return tuple(program)


def compile_string(contents: str, modulename: str = 'main') -> Tuple[inst.Inst, ...]:
    return compile_items([CompilationItem(modulename, contents)])


def assemble(items: List[CompilationItem]) -> bytes:
    return program_code(compile_items(items))
