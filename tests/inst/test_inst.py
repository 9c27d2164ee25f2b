import pytest

import evminst.common.ops as ops
import evminst.common.inst as inst


def test_unknown():
    assert inst.inst_code(inst.Unknown(0xFE)) == b'\xfe'
    assert inst.mnemonic(inst.Unknown(0xFE)) == 'UNKNOWN(0xfe)'

    for bad in (-1, 0x100):
        with pytest.raises(ops.InvalidParameter):
            inst.Unknown(bad)


def test_family_instructions():
    assert inst.inst_code(inst.BitInst(ops.Bits.XOR)) == b'\x18'
    assert inst.inst_code(inst.SArithInst(ops.SArith.SIGNEXTEND)) == b'\x0b'
    assert inst.inst_code(inst.ArithInst(ops.Arith.SHA3)) == b'\x20'
    assert inst.inst_code(inst.InfoInst(ops.Info.GAS)) == b'\x5a'
    assert inst.inst_code(inst.MemoryInst(ops.Memory.MSIZE)) == b'\x59'
    assert inst.inst_code(inst.StorageInst(ops.Storage.SSTORE)) == b'\x55'
    assert inst.inst_code(inst.PcInst(ops.Pc.JUMPDEST)) == b'\x5b'
    assert inst.inst_code(inst.StackInst(ops.Stack.POP)) == b'\x50'
    assert inst.inst_code(inst.LogInst(ops.Log.LOG4)) == b'\xa4'
    assert inst.inst_code(inst.MiscInst(ops.Misc.RETURN)) == b'\xf3'


def test_wrap():
    assert inst.wrap(ops.Pc.JUMP) == inst.PcInst(ops.Pc.JUMP)
    assert inst.wrap(ops.Log.LOG0) == inst.LogInst(ops.Log.LOG0)

    with pytest.raises(TypeError):
        inst.wrap(0x56)


def test_mismatched_wrapper():
    with pytest.raises(TypeError):
        inst.inst_code(inst.PcInst(ops.Misc.STOP))  # type: ignore


@pytest.mark.parametrize('length', [1, 2, 20, 31, 32])
def test_push_width(length):
    data = bytes(range(length))
    code = inst.inst_code(inst.Push(data))

    assert len(code) == 1 + length
    assert code[0] == 0x5F + length
    assert code[1:] == data
    assert inst.inst_size(inst.Push(data)) == 1 + length


@pytest.mark.parametrize('length', [0, 33])
def test_push_length_rejected(length):
    with pytest.raises(ops.InvalidImmediateLength):
        inst.inst_code(inst.Push(bytes(length)))


def test_push_keeps_order():
    assert inst.inst_code(inst.Push([0xAA, 0x00, 0xBB])) == b'\x62\xaa\x00\xbb'


def test_push_data_is_immutable():
    data = bytearray(b'\x01\x02')
    push = inst.Push(data)
    data[0] = 0xFF

    assert push.data == b'\x01\x02'
    assert push == inst.Push([1, 2])


def test_push_data_must_be_bytes():
    with pytest.raises(ops.InvalidParameter):
        inst.Push([0x100])


@pytest.mark.parametrize('data', [3, 0, True])
def test_push_data_rejects_int(data):
    with pytest.raises(ops.InvalidParameter):
        inst.Push(data)


def test_base_instruction_has_no_json():
    with pytest.raises(NotImplementedError):
        inst.Instruction().json()


def test_dup_swap():
    assert inst.inst_code(inst.Dup(1)) == b'\x80'
    assert inst.inst_code(inst.Dup(16)) == b'\x8f'
    assert inst.inst_code(inst.Swap(1)) == b'\x90'
    assert inst.inst_code(inst.Swap(16)) == b'\x9f'

    for n in (0, 17):
        with pytest.raises(ops.InvalidParameter):
            inst.inst_code(inst.Dup(n))

        with pytest.raises(ops.InvalidParameter):
            inst.inst_code(inst.Swap(n))


def test_annotation():
    seen = []

    def positive(state):
        seen.append(state)
        return state > 0

    annotation = inst.Annotation(positive)

    assert inst.inst_code(annotation) == b''
    assert inst.inst_size(annotation) == 0
    assert inst.mnemonic(annotation) == 'ANNOTATION'
    assert annotation.holds(1)
    assert not annotation.holds(-1)
    assert seen == [1, -1]
    assert annotation.json() == {'Class': 'Annotation', 'Predicate': 'positive'}


def test_mnemonics():
    assert inst.mnemonic(inst.Push(b'\x01\x02')) == 'PUSH2'
    assert inst.mnemonic(inst.Dup(3)) == 'DUP3'
    assert inst.mnemonic(inst.Swap(16)) == 'SWAP16'
    assert inst.mnemonic(inst.StorageInst(ops.Storage.SLOAD)) == 'SLOAD'


def test_json():
    assert inst.Push(b'\xaa\xbb').json() == {'Class': 'Push', 'Data': 'aabb'}
    assert inst.PcInst(ops.Pc.JUMP).json() == {'Class': 'PcInst', 'Op': 'JUMP'}
    assert inst.Dup(2).json() == {'Class': 'Dup', 'N': 2}


def test_not_an_instruction():
    with pytest.raises(TypeError):
        inst.inst_code('STOP')  # type: ignore


def test_push_int():
    assert inst.push_int(0) == inst.Push(b'\x00')
    assert inst.push_int(0x1234) == inst.Push(b'\x12\x34')
    assert inst.push_int(5, width=2) == inst.Push(b'\x00\x05')
    assert inst.push_int(2 ** 256 - 1) == inst.Push(b'\xff' * 32)

    with pytest.raises(ops.InvalidImmediateLength):
        inst.push_int(2 ** 256)

    with pytest.raises(ops.InvalidImmediateLength):
        inst.push_int(0x100, width=1)

    with pytest.raises(ops.InvalidParameter):
        inst.push_int(-1)
