#
# Copyright 2024 Einar Halvorsen
#
# License: GPL-3.0-or-later
#
"""Shared pytest fixtures with sample dbc content."""

import pytest

import candbc

SAMPLE_DBC = b"""
VERSION "0.1"
NS_ :
    NS_DESC_
    CM_
    BA_DEF_
    BA_
    VAL_
    CAT_DEF_
    CAT_
    FILTER
    BA_DEF_DEF_
    EV_DATA_
    ENVVAR_DATA_
    SGTYPE_
    SGTYPE_VAL_
    BA_DEF_SGTYPE_
    BA_SGTYPE_
    SIG_TYPE_REF_
    VAL_TABLE_
    SIG_GROUP_
    SIG_VALTYPE_
    SIGTYPE_VALTYPE_
    BO_TX_BU_
    BA_DEF_REL_
    BA_REL_
    BA_DEF_DEF_REL_
    BU_SG_REL_
    BU_EV_REL_
    BU_BO_REL_
    SG_MUL_VAL_
BS_:
BU_: PC
BO_ 2000 WebData_2000: 4 Vector__XXX
    SG_ Signal_8 : 24|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_7 : 16|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_6 : 8|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_5 : 0|8@1+ (1,0) [0|255] "" Vector__XXX
BO_ 1840 WebData_1840: 4 PC
    SG_ Signal_4 : 24|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_3 : 16|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_2 : 8|8@1+ (1,0) [0|255] "" Vector__XXX
    SG_ Signal_1 : 0|8@1+ (1,0) [0|0] "" Vector__XXX

EV_ Environment1: 0 [0|220] "" 0 6 DUMMY_NODE_VECTOR0 DUMMY_NODE_VECTOR2;
EV_ Environment2: 0 [0|177] "" 0 7 DUMMY_NODE_VECTOR1 DUMMY_NODE_VECTOR2;
ENVVAR_DATA_ SomeEnvVarData: 399;

CM_ SG_ 4 TestSigLittleUnsigned1 "asaklfjlsdfjlsdfgls
HH?=(%)/&KKDKFSDKFKDFKSDFKSDFNKCnvsdcvsvxkcv";
CM_ SG_ 5 TestSigLittleUnsigned1 "asaklfjlsdfjlsdfgls
=0943503450KFSDKFKDFKSDFKSDFNKCnvsdcvsvxkcv";

BA_DEF_DEF_ "BusType" "AS";

BA_ "Attr" BO_ 4358435 283;
BA_ "Attr" BO_ 56949545 344;
"""

MINIMAL_DBC = b"""VERSION "1.0"
NS_ :

BS_:
BU_: ECU1 ECU2
BO_ 256 EngineData: 8 ECU1
 SG_ Mux M : 0|4@1+ (1,0) [0|15] "" ECU2
 SG_ Speed m0 : 8|16@1+ (0.01,0) [0|655.35] "km/h" ECU2
 SG_ Temp m1 : 8|8@1- (1,-40) [-40|215] "degC" ECU2,ECU1
 SG_ Rpm : 24|16@0+ (0.25,0) [0|16383.75] "rpm" ECU2
EV_ EnvSpeed: 0 [0|300] "km/h" 0 1 DUMMY_NODE_VECTOR0 ECU1;
EV_ EnvBlob: 2 [0|0] "" 0 2 DUMMY_NODE_VECTOR3 Vector__XXX;
ENVVAR_DATA_ EnvBlob: 8;
CM_ SG_ 256 Speed "Vehicle speed";
CM_ SG_ 256 Rpm "Engine speed";
BA_DEF_DEF_ "GenMsgCycleTime" 100;
BA_ "GenMsgCycleTime" BO_ 256 20;
BA_ "GenSigStartValue" SG_ 256 Rpm 0;
"""

FULL_DBC = b"""VERSION ""

NS_ :
\tCM_
\tBA_DEF_

BS_: 500,250

BU_: Gateway Dashboard

VAL_TABLE_ GearTable 0 "Park" 1 "Reverse" 2 "Neutral" 3 "Drive" ;

BO_ 512 GearState: 2 Gateway
 SG_ Gear : 0|3@1+ (1,0) [0|7] "" Dashboard

BO_ 768 Odometer: 4 Dashboard
 SG_ Distance : 0|32@1+ (0.1,0) [0|429496729.5] "km" Gateway

BO_TX_BU_ 512 : Gateway,Dashboard;

EV_ EnvGear: 1 [0|7] "" 0 3 DUMMY_NODE_VECTOR2 Gateway;

SGTYPE_ GearType: 3@1+ (1,0) [0|7] "" 0 GearTable;

CM_ "Vehicle network";
CM_ BU_ Gateway "Central gateway";
CM_ BO_ 512 "Selected gear";
CM_ EV_ EnvGear "Simulated gear";
CM_ SG_ 768 Distance "Total distance";

BA_DEF_ BO_ "GenMsgCycleTime" INT 0 65535;
BA_DEF_ SG_ "GenSigUnit" STRING ;
BA_DEF_ BU_ "NodeLayer" ENUM "App","Diag";
BA_DEF_ EV_ "EnvScale" FLOAT 0 10;
BA_DEF_  "BusType" STRING ;

BA_DEF_DEF_  "GenMsgCycleTime" 100;
BA_DEF_DEF_  "BusType" "CAN";

BA_ "BusType" "CAN";
BA_ "NodeLayer" BU_ Gateway 0;
BA_ "GenMsgCycleTime" BO_ 512 50;
BA_ "GenSigUnit" SG_ 768 Distance "km";
BA_ "EnvScale" EV_ EnvGear 1.5;

VAL_ 512 Gear 0 "Park" 1 "Reverse" 2 "Neutral" 3 "Drive" ;
VAL_ EnvGear 0 "P" 3 "D" ;

SGTYPE_ 512 Gear : GearType;

SIG_GROUP_ 768 OdoGroup 1 : Distance;

SIG_VALTYPE_ 768 Distance : 1;
"""


@pytest.fixture
def parser():
    return candbc.Parser()


@pytest.fixture
def sample_dbc():
    return SAMPLE_DBC


@pytest.fixture
def minimal_dbc():
    return MINIMAL_DBC


@pytest.fixture
def full_dbc():
    return FULL_DBC


@pytest.fixture
def full_document():
    return candbc.parse(FULL_DBC)


@pytest.fixture
def run(parser):
    """Run one grammar rule on a buffer.

    Returns the parsed value and the remaining bytes.
    """
    def run(rule, buffer):
        parser.feed(buffer)
        value = getattr(parser, rule)()
        return value, parser.rest()
    return run
