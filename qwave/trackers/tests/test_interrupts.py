import math

import pytest

from qwave.trackers.interrupts import (
    ConstantInterrupts,
    FixedInterrupts,
    parse_interrupt,
)


def test_interrupt_constant():
    """test the ConstantInterrupts class"""
    ival1 = ConstantInterrupts(2)
    ival2 = ival1.copy()  # test copying too

    assert ival1.initialize(1) == 1
    assert ival1.next(1) == 3
    assert ival1.next(3) == 5
    assert ival1.interval == 2

    assert ival2.initialize(0) == 0
    assert ival2.next(0) == 2
    # interrupts that lie in the past are skipped
    assert ival2.next(7) == 8

    ival3 = ival1.copy()  # test copying after starting too
    assert ival3.initialize(0) == 0
    assert ival3.next(0) == 2

    with pytest.raises(ValueError):
        ConstantInterrupts(0)
    with pytest.raises(ValueError):
        ConstantInterrupts(1.5)


def test_interrupt_start():
    """test the start argument of interrupts"""
    ival = ConstantInterrupts(2, start=7)
    assert ival.initialize(0) == 7
    assert ival.next(7) == 9
    assert ival.next(9) == 11
    assert ival.initialize(10) == 10
    assert "start=7" in repr(ival)


def test_interrupt_fixed():
    """test the FixedInterrupts class"""
    ival = FixedInterrupts([5, 2, 2, 8])
    assert list(ival.interrupts) == [2, 5, 8]
    assert ival.initialize(0) == 2
    assert ival.next(2) == 5
    assert ival.next(5) == 8
    assert ival.next(8) == math.inf

    # the initial tick itself can trigger an interrupt
    assert ival.initialize(5) == 5
    assert ival.next(6) == 8

    ival2 = ival.copy()
    assert ival2.initialize(0) == 2
    assert ival.next(5) == 8

    assert FixedInterrupts(3).initialize(0) == 3
    with pytest.raises(ValueError):
        FixedInterrupts([[1, 2], [3, 4]])


def test_parse_interrupt():
    """test creating interrupts from various data"""
    ival = parse_interrupt(3)
    assert isinstance(ival, ConstantInterrupts)
    assert ival.interval == 3

    ival = parse_interrupt([1, 4])
    assert isinstance(ival, FixedInterrupts)
    assert parse_interrupt(ival) is ival

    with pytest.raises(TypeError):
        parse_interrupt("often")
