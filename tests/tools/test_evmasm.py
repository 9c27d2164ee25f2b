import json
import logging as lg

from click.testing import CliRunner

from evminst.tools.evmasm import compile, EXIT_OK, EXIT_ASM_ERROR, EXIT_BAD_JUMP

from unit_utils import find_file


def run(*args):
    return CliRunner().invoke(compile, [str(a) for a in args])


def test_compile(tmp_path):
    binary = tmp_path / 'out' / 'loop.bin'
    result = run(find_file('testdata/sasm/loop.easm'), binary)

    assert result.exit_code == EXIT_OK
    assert binary.read_bytes() == bytes.fromhex('60035b60019003806100025700')


def test_compile_multiple(tmp_path):
    binary = tmp_path / 'main.bin'
    result = run(
        find_file('testdata/sasm/main.easm'),
        find_file('testdata/sasm/lib.easm'),
        binary
    )

    assert result.exit_code == EXIT_OK
    assert binary.read_bytes() == bytes.fromhex('610004565b602a5000')


def test_listing(tmp_path, caplog):
    caplog.set_level(lg.INFO)
    result = run('--listing', find_file('testdata/sasm/loop.easm'), tmp_path / 'loop.bin')

    assert result.exit_code == EXIT_OK
    assert any('0008: 610002' in m and 'PUSH2' in m for m in caplog.messages)


def test_check_jumps_ok(tmp_path):
    binary = tmp_path / 'loop.bin'
    result = run('--check-jumps', find_file('testdata/sasm/loop.easm'), binary)

    assert result.exit_code == EXIT_OK
    assert binary.exists()


def test_check_jumps_bad(tmp_path, caplog):
    binary = tmp_path / 'bad.bin'
    result = run('--check-jumps', find_file('testdata/sasm/badjump.easm'), binary)

    assert result.exit_code == EXIT_BAD_JUMP
    assert not binary.exists()
    assert any('targets 0x4' in m for m in caplog.messages)


def test_assembly_error(tmp_path, caplog):
    source = tmp_path / 'broken.easm'
    source.write_text('push1 0x01\nfrobnicate\n')
    result = run(source, tmp_path / 'broken.bin')

    assert result.exit_code == EXIT_ASM_ERROR
    assert any('frobnicate' in m for m in caplog.messages)


def test_dump(tmp_path):
    dump = tmp_path / 'main.json'
    result = run(
        '--dump', dump,
        find_file('testdata/sasm/main.easm'),
        find_file('testdata/sasm/lib.easm'),
        tmp_path / 'main.bin'
    )

    assert result.exit_code == EXIT_OK

    rows = json.loads(dump.read_text())
    assert rows[0] == {'Offset': 0, 'Class': 'Push', 'Data': '0004'}
    assert rows[1] == {'Offset': 3, 'Class': 'PcInst', 'Op': 'JUMP'}
    assert rows[-1] == {'Offset': 8, 'Class': 'MiscInst', 'Op': 'STOP'}


def test_missing_source(tmp_path):
    binary = tmp_path / 'out.bin'
    result = run(tmp_path / 'nowhere.easm', binary)

    assert result.exit_code == 2
    assert 'does not exist' in result.output
    assert not binary.exists()
