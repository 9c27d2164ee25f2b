import sys
import json
from pathlib import Path
import logging as lg
from typing import Tuple, List

import click

from evminst.sasm.asm import CompilationItem, compile_items
from evminst.sasm.fpp import AsmError
from evminst.common.ops import EncodingError
import evminst.common.inst as inst
import evminst.common.program as prog


EXIT_OK = 0
EXIT_ASM_ERROR = 1
EXIT_BAD_JUMP = 3  # click reserves 2 for usage errors


def collect_file(filepath: str | Path) -> CompilationItem:
    if isinstance(filepath, str):
        filepath = Path(filepath)

    lg.debug(f'Collecting file {filepath}')
    return CompilationItem(filepath.stem, filepath.read_text())


def collect_files(filepaths: List[Path]) -> List[CompilationItem]:
    return [collect_file(path) for path in filepaths]


def log_listing(program: prog.Program):
    for offset, instruction in prog.listing(program):
        code = inst.inst_code(instruction).hex()
        lg.info(f'{offset:04X}: {code:<16} {inst.mnemonic(instruction)}')


def dump_program(program: prog.Program, path: Path):
    rows = [
        {'Offset': offset, **instruction.json()}
        for offset, instruction in prog.listing(program)
    ]

    path.write_text(json.dumps(rows, indent=2))


def bad_jumps(program: prog.Program) -> List[Tuple[int, int]]:
    return [
        (offset, target) for offset, target in prog.static_jumps(program)
        if not prog.is_jumpdest(program, target)
    ]


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--listing', is_flag=True, help='Logs offsets and encodings')
@click.option('--check-jumps', is_flag=True, help='Fails on static jumps to non-JUMPDEST')
@click.option('--dump', type=click.Path(path_type=Path), help='Writes the program as JSON')
@click.argument('sources', nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('binary', type=Path)
def compile(
    verbose: bool, listing: bool, check_jumps: bool, dump: Path | None,
    sources: Tuple[Path], binary: Path
):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('EVM ASM')

    try:
        program = compile_items(collect_files(list(sources)))
        bytestr = prog.program_code(program)
    except (AsmError, EncodingError) as e:
        lg.error(f'Assembly failed: {e}')
        sys.exit(EXIT_ASM_ERROR)

    if listing:
        log_listing(program)

    if dump:
        dump_program(program, dump)

    if check_jumps:
        bad = bad_jumps(program)

        for offset, target in bad:
            lg.error(f'Jump at 0x{offset:X} targets 0x{target:X}, not a JUMPDEST')

        if bad:
            sys.exit(EXIT_BAD_JUMP)

    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(bytestr)
    lg.info(f'Wrote {len(bytestr)} bytes to {binary}')
    sys.exit(EXIT_OK)


if __name__ == '__main__':
    compile()
