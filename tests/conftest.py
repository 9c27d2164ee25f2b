# type: ignore
import pytest

import evminst.common.ops as ops
import evminst.common.inst as inst


@pytest.fixture
def jumpdest():
    yield inst.PcInst(ops.Pc.JUMPDEST)


@pytest.fixture
def stop():
    yield inst.MiscInst(ops.Misc.STOP)


@pytest.fixture
def always():
    yield inst.Annotation(lambda _: True)


@pytest.fixture
def push_jumpdest(jumpdest):
    yield (inst.Push([0xAA, 0xBB]), jumpdest)
