#
# Copyright 2024 Einar Halvorsen
#
# License: GPL-3.0-or-later
#
import warnings

import pytest

import candbc


def test_sample_references(sample_dbc):
    document = candbc.parse(sample_dbc)
    with pytest.warns(candbc.DatabaseWarning):
        problems = candbc.check_references(document)
    assert problems == [
        'environment variable "Environment1" refers to undefined node '
        '"DUMMY_NODE_VECTOR2"',
        'environment variable "Environment2" refers to undefined node '
        '"DUMMY_NODE_VECTOR2"',
        'ENVVAR_DATA_ refers to undefined environment variable '
        '"SomeEnvVarData"',
        'comment refers to undefined message id "4"',
        'comment refers to undefined message id "5"',
        'attribute value "Attr" refers to undefined message id "4358435"',
        'attribute value "Attr" refers to undefined message id "56949545"',
    ]


def test_strict(sample_dbc):
    document = candbc.parse(sample_dbc)
    with pytest.raises(candbc.DatabaseError) as ei:
        candbc.check_references(document, strict=True)
    assert 'DUMMY_NODE_VECTOR2' in str(ei.value)


@pytest.mark.parametrize("fixture", ['minimal_dbc', 'full_dbc'])
def test_consistent(request, fixture):
    document = candbc.parse(request.getfixturevalue(fixture))
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        assert candbc.check_references(document) == []


def test_dangling_signal_and_value_table(full_dbc):
    text = full_dbc.replace(b'SIG_GROUP_ 768 OdoGroup 1 : Distance;',
                            b'SIG_GROUP_ 768 OdoGroup 1 : Trip;')
    text = text.replace(b'0 GearTable;', b'0 NoTable;')
    document = candbc.parse(text)
    with pytest.warns(candbc.DatabaseWarning):
        problems = candbc.check_references(document)
    assert problems == [
        'signal type "GearType" refers to undefined value table "NoTable"',
        'signal group "OdoGroup" refers to undefined signal "Trip" in '
        'message "768"',
    ]
