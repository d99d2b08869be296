#
# Copyright 2024 Einar Halvorsen
#
# License: GPL-3.0-or-later
#
import pytest

import candbc
from candbc import (AccessType, ByteOrder, EnvType, Multiplexor,
                    MultiplexedSignal, Plain, SignalExtendedValueType,
                    ValueType)


def test_byte_order(run):
    assert run('byte_order', b"0")[0] == ByteOrder.BIG_ENDIAN
    assert run('byte_order', b"1")[0] == ByteOrder.LITTLE_ENDIAN


@pytest.mark.parametrize("text", [b"2", b"+", b" ", b""])
def test_byte_order_rejects(run, text):
    with pytest.raises(candbc.LexicalError):
        run('byte_order', text)


def test_value_type(run):
    assert run('value_type', b"- ") == (ValueType.SIGNED, b" ")
    assert run('value_type', b"+ ") == (ValueType.UNSIGNED, b" ")
    with pytest.raises(candbc.LexicalError):
        run('value_type', b"0")


@pytest.mark.parametrize("text,expected", [
    (b" m34920 ", MultiplexedSignal(34920)),
    (b" M ", Multiplexor()),
    (b" ", Plain()),
])
def test_multiplexer_indicator(run, text, expected):
    assert run('multiplexer_indicator', text) == (expected, b"")


def test_plain_leaves_colon(run):
    assert run('multiplexer_indicator', b" : 3") == (Plain(), b": 3")


@pytest.mark.parametrize("text", [b"3m34920 ", b"1M ", b"m3 "])
def test_multiplexer_indicator_rejects(run, text):
    with pytest.raises(candbc.AlternativeError) as ei:
        run('multiplexer_indicator', text)
    assert ei.value.alternatives == ['multiplexed signal', 'multiplexor',
                                     'plain']
    assert len(ei.value.errors) == 3


@pytest.mark.parametrize("text,expected", [
    (b"0", EnvType.FLOAT),
    (b"1", EnvType.INTEGER),
    (b"2", EnvType.DATA),
])
def test_env_var_type(run, text, expected):
    assert run('env_var_type', text)[0] == expected


def test_access_type(run):
    assert run('access_type', b"DUMMY_NODE_VECTOR0")[0] == \
        AccessType.UNRESTRICTED
    assert run('access_type', b"DUMMY_NODE_VECTOR3")[0] == \
        AccessType.READ_WRITE
    with pytest.raises(candbc.LexicalError):
        run('access_type', b"DUMMY_NODE_VECTOR4")


@pytest.mark.parametrize("text,expected", [
    (b"0", SignalExtendedValueType.INTEGER),
    (b"1", SignalExtendedValueType.FLOAT32),
    (b"2", SignalExtendedValueType.FLOAT64),
])
def test_signal_extended_value_type(run, text, expected):
    assert run('signal_extended_value_type', text)[0] == expected


def test_transmitter(run):
    assert run('transmitter', b"Vector__XXX")[0] == candbc.NoTransmitter()
    assert run('transmitter', b"ECU1")[0] == candbc.NodeTransmitter('ECU1')
    assert run('transmitter', b"Vector__XXXa")[0] == \
        candbc.NodeTransmitter('Vector__XXXa')


def test_access_node(run):
    assert run('access_node', b"VECTOR_XXX")[0] == candbc.NoAccessNode()
    assert run('access_node', b"Vector__XXX")[0] == candbc.NoAccessNode()
    assert run('access_node', b"ECU1")[0] == candbc.NamedAccessNode('ECU1')
