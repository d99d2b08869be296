"""Parse CAN-bus network descriptions in the dbc format.

The module has a Parser class that recognizes the content of a dbc file held
in a byte buffer and assembles it into one immutable Document. The Document
holds every section of the file in the fixed order the format prescribes:
version, new symbols, bit timing, nodes, value tables, messages with their
signals, message transmitters, environment variables, signal types,
comments, attribute definitions, defaults and values, value descriptions,
signal type references, signal groups and extended signal value types.

Parsing is one-directional. Nothing is decoded from CAN frames and no dbc
text is generated. References between sections (message ids, signal, node
and environment variable names) are stored as plain data. The function
check_references can be run on a parsed Document to report references that
do not resolve.

Usage:
    document = candbc.parse(buffer)
    for message in document.messages:
        for signal in message.signals:
            print(message.name, signal.name)
"""
#
# Copyright 2024 Einar Halvorsen
#
# License: GPL-3.0-or-later
#
import logging
import re
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'[ \t\r\n\f\v]*')
_BLANKS = re.compile(r'[ \t]*')
_IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
_UINT = re.compile(r'[0-9]+')
_SINT = re.compile(r'[-+]?[0-9]+')
_DOUBLE = re.compile(r'[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?')
_GROUP_SEPARATOR = re.compile(r'[ \t]*,?[ \t]*')

_U64_MAX = 2**64 - 1
_I64_MIN = -2**63
_I64_MAX = 2**63 - 1
_U64_DIGITS = len(str(_U64_MAX))
_I64_DIGITS = len(str(_I64_MAX))

NO_NODE = 'Vector__XXX'
_NO_ACCESS_NODE = ('VECTOR_XXX', 'VECTOR__XXX', NO_NODE)


def _decode(text):
    """Decode scanned quoted-string content as utf-8."""
    return text.encode('latin-1').decode('utf-8', errors='replace')


# --------------------------
# Errors
# --------------------------

class DbcError(Exception):
    """Base class for errors raised by this module.

    """


class ParseError(DbcError):
    """Syntax errors during parsing of dbc-file.

    """
    at_end = False

    def __init__(self, line, col, pos, msg, *args):
        """Initializes ParseError object.

        Reports failure to parse buffer.

        Args:
            line(int): Line number of error, starting at 1.
            col(int):  Column number of error, starting at 0.
            pos(int):  Byte offset of error.
            msg(str):  Informative description of error.
            args:      Arguments formatted into msg.
        """
        super().__init__(line, col, pos, msg, *args)
        self.line = line
        self.col = col
        self.pos = pos
        self.msg = msg
        self.msg_args = args

    @property
    def description(self):
        return self.msg.format(*self.msg_args)

    def __str__(self):
        return "{} line {}, column {}".format(self.description, self.line,
                                              self.col)


class LexicalError(ParseError):
    """A primitive token did not match at the current position.

    """


class EndOfInputError(LexicalError):
    """Input ended where a primitive token was expected.

    """
    at_end = True


class StructuralError(ParseError):
    """A construct was recognized by its keyword, but a later field was not.

    """
    def __init__(self, rule, cause):
        """Initializes StructuralError object.

        Args:
            rule(str):            Keyword of the interrupted construct.
            cause(LexicalError):  The mismatch that interrupted it.
        """
        super().__init__(cause.line, cause.col, cause.pos, "In {}: {}",
                         rule, cause.description)
        self.rule = rule
        self.cause = cause
        self.at_end = cause.at_end


class AlternativeError(ParseError):
    """None of the alternatives at a fixed decision point matched.

    """
    def __init__(self, line, col, pos, alternatives, errors):
        """Initializes AlternativeError object.

        Args:
            line(int), col(int), pos(int): Position of the decision point.
            alternatives(list): Names of the alternatives tried, in order.
            errors(list):       The ParseError raised by each alternative.
        """
        furthest = max(errors, key=lambda e: e.pos)
        super().__init__(line, col, pos, "None of {} matched ({}) at",
                         ", ".join(alternatives), str(furthest))
        self.alternatives = alternatives
        self.errors = errors
        self.at_end = furthest.at_end


class Incomplete(DbcError):
    """All sections were parsed, but input remains that matched none of them.

    The partially built document and the unconsumed bytes are kept so the
    caller can decide if this is fatal.
    """
    def __init__(self, document, remaining, line, col, pos, reason=None):
        super().__init__(document, remaining, line, col, pos, reason)
        self.document = document
        self.remaining = remaining
        self.line = line
        self.col = col
        self.pos = pos
        self.reason = reason

    def __str__(self):
        s = "Unrecognizable text remains from line {}, column {}".format(
            self.line, self.col)
        if self.reason is not None:
            s += " ({})".format(self.reason)
        return s


class DatabaseError(DbcError):
    """Unresolved references in a parsed document.

    """
    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg


class DatabaseWarning(Warning):
    """Warnings about references in a document that do not resolve.

    """
    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg


# --------------------------
# Scalar domains
# --------------------------

class ByteOrder(Enum):
    LITTLE_ENDIAN = '1'
    BIG_ENDIAN = '0'


class ValueType(Enum):
    SIGNED = '-'
    UNSIGNED = '+'


class EnvType(Enum):
    FLOAT = '0'
    INTEGER = '1'
    DATA = '2'


class AccessType(Enum):
    """Access of an environment variable, coded as DUMMY_NODE_VECTOR<n>."""
    UNRESTRICTED = '0'
    READ = '1'
    WRITE = '2'
    READ_WRITE = '3'


class SignalExtendedValueType(Enum):
    INTEGER = '0'
    FLOAT32 = '1'
    FLOAT64 = '2'


class MultiplexIndicator:
    """Role of a signal in multiplexing.

    """


@dataclass(frozen=True)
class Plain(MultiplexIndicator):
    """Signal that is present in every frame."""


@dataclass(frozen=True)
class Multiplexor(MultiplexIndicator):
    """The switch signal selecting which multiplexed signals are present."""


@dataclass(frozen=True)
class MultiplexedSignal(MultiplexIndicator):
    """Signal present when the multiplexor has the given value."""
    value: int


class Transmitter:
    """Sender of a message.

    """


@dataclass(frozen=True)
class NodeTransmitter(Transmitter):
    node_name: str


@dataclass(frozen=True)
class NoTransmitter(Transmitter):
    """The message has no sender, written Vector__XXX."""


class AccessNode:
    """Node with access to an environment variable.

    """


@dataclass(frozen=True)
class NamedAccessNode(AccessNode):
    node_name: str


@dataclass(frozen=True)
class NoAccessNode(AccessNode):
    """No node has access, written VECTOR_XXX."""


# --------------------------
# Entities
# --------------------------

@dataclass(frozen=True)
class ValueLabel:
    """A raw value and the text describing it."""
    value: float
    label: str


@dataclass(frozen=True)
class Node:
    """The names of the nodes on the network, from one BU_ line."""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class ValueTable:
    name: str
    labels: Tuple[ValueLabel, ...]


@dataclass(frozen=True)
class Signal:
    """A bit-field within the payload of a message.

    The physical value of the signal is factor * raw + offset, where raw is
    the size bits starting at start_bit interpreted with byte_order and
    value_type.
    """
    name: str
    multiplexer_indicator: MultiplexIndicator
    start_bit: int
    size: int
    byte_order: ByteOrder
    value_type: ValueType
    factor: float
    offset: float
    minimum: float
    maximum: float
    unit: str
    receivers: Tuple[str, ...]

    @property
    def is_multiplexor(self):
        return isinstance(self.multiplexer_indicator, Multiplexor)

    @property
    def multiplex_value(self):
        """Multiplexor value selecting the signal, None if not multiplexed.

        """
        if isinstance(self.multiplexer_indicator, MultiplexedSignal):
            return self.multiplexer_indicator.value
        return None


@dataclass(frozen=True)
class Message:
    """A CAN message and the signals it carries, in declaration order.

    """
    id: int
    name: str
    size: int
    transmitter: Transmitter
    signals: Tuple[Signal, ...]

    def signal(self, name):
        """Returns the first signal named name, or None.

        """
        for signal in self.signals:
            if signal.name == name:
                return signal
        return None

    @property
    def multiplexor(self):
        for signal in self.signals:
            if signal.is_multiplexor:
                return signal
        return None

    def multiplexed(self, value):
        """Returns the signals present when the multiplexor equals value.

        """
        return tuple(s for s in self.signals if s.multiplex_value == value)


@dataclass(frozen=True)
class MessageTransmitter:
    """Additional senders of a message, from a BO_TX_BU_ line."""
    message_id: int
    transmitters: Tuple[Transmitter, ...]

    @property
    def transmitter(self):
        return self.transmitters[0]


@dataclass(frozen=True)
class EnvironmentVariable:
    name: str
    env_type: EnvType
    minimum: int
    maximum: int
    unit: str
    initial_value: float
    ev_id: int
    access_type: AccessType
    access_nodes: Tuple[AccessNode, ...]


@dataclass(frozen=True)
class EnvironmentVariableData:
    name: str
    size: int


@dataclass(frozen=True)
class SignalType:
    name: str
    size: int
    byte_order: ByteOrder
    value_type: ValueType
    factor: float
    offset: float
    minimum: float
    maximum: float
    unit: str
    default_value: float
    value_table: str


class Comment:
    """Free text attached to a node, message, signal, environment variable
    or to the network as a whole.

    """


@dataclass(frozen=True)
class NodeComment(Comment):
    node_name: str
    text: str


@dataclass(frozen=True)
class MessageComment(Comment):
    message_id: int
    text: str


@dataclass(frozen=True)
class SignalComment(Comment):
    message_id: int
    signal_name: str
    text: str


@dataclass(frozen=True)
class EnvVarComment(Comment):
    env_var_name: str
    text: str


@dataclass(frozen=True)
class PlainComment(Comment):
    text: str


@dataclass(frozen=True)
class IntDomain:
    minimum: int
    maximum: int


@dataclass(frozen=True)
class HexDomain:
    minimum: int
    maximum: int


@dataclass(frozen=True)
class FloatDomain:
    minimum: float
    maximum: float


@dataclass(frozen=True)
class StringDomain:
    pass


@dataclass(frozen=True)
class EnumDomain:
    labels: Tuple[str, ...]


class AttributeDefinition:
    """Declaration of a named attribute for a class of objects.

    The definition is kept as the verbatim text following the object type,
    e.g. '"GenMsgCycleTime" INT 0 65535'. The attribute name and value
    domain are decoded from it on first access; a definition that cannot be
    decoded raises ParseError from these properties only.
    """
    @cached_property
    def _decoded(self):
        return Parser().attribute_definition_body(self.definition)

    @property
    def attribute_name(self):
        return self._decoded[0]

    @property
    def value_type(self):
        return self._decoded[1]


@dataclass(frozen=True)
class NodeAttributeDefinition(AttributeDefinition):
    definition: str


@dataclass(frozen=True)
class MessageAttributeDefinition(AttributeDefinition):
    definition: str


@dataclass(frozen=True)
class SignalAttributeDefinition(AttributeDefinition):
    definition: str


@dataclass(frozen=True)
class EnvVarAttributeDefinition(AttributeDefinition):
    definition: str


@dataclass(frozen=True)
class PlainAttributeDefinition(AttributeDefinition):
    definition: str


AttributeValue = Union[float, str]


@dataclass(frozen=True)
class AttributeDefault:
    name: str
    value: AttributeValue


class ObjectAttributeValue:
    """Target of an attribute assignment and the value assigned.

    """


@dataclass(frozen=True)
class RawAttributeValue(ObjectAttributeValue):
    value: AttributeValue


@dataclass(frozen=True)
class NodeAttributeValue(ObjectAttributeValue):
    node_name: str
    value: AttributeValue


@dataclass(frozen=True)
class MessageAttributeValue(ObjectAttributeValue):
    message_id: int
    value: Optional[AttributeValue]


@dataclass(frozen=True)
class SignalAttributeValue(ObjectAttributeValue):
    message_id: int
    signal_name: str
    value: AttributeValue


@dataclass(frozen=True)
class EnvVarAttributeValue(ObjectAttributeValue):
    env_var_name: str
    value: AttributeValue


@dataclass(frozen=True)
class AttributeValueForObject:
    name: str
    target: ObjectAttributeValue


class ValueDescription:
    """Labels for the raw values of a signal or an environment variable.

    """


@dataclass(frozen=True)
class SignalValueDescription(ValueDescription):
    message_id: int
    signal_name: str
    labels: Tuple[ValueLabel, ...]


@dataclass(frozen=True)
class EnvVarValueDescription(ValueDescription):
    env_var_name: str
    labels: Tuple[ValueLabel, ...]


@dataclass(frozen=True)
class SignalTypeRef:
    message_id: int
    signal_name: str
    signal_type_name: str


@dataclass(frozen=True)
class SignalGroups:
    message_id: int
    name: str
    repetitions: int
    signal_names: Tuple[str, ...]


@dataclass(frozen=True)
class SignalExtendedValueTypeList:
    message_id: int
    signal_name: str
    value_type: SignalExtendedValueType


@dataclass(frozen=True)
class Document:
    """Everything contained in a dbc file, in the order of the file.

    bit_timing is None when the file has no BS_ section and an empty tuple
    when the section lists no rates.
    """
    version: str
    new_symbols: Tuple[str, ...]
    bit_timing: Optional[Tuple[int, ...]]
    nodes: Tuple[Node, ...]
    value_tables: Tuple[ValueTable, ...]
    messages: Tuple[Message, ...]
    message_transmitters: Tuple[MessageTransmitter, ...]
    environment_variables: Tuple[EnvironmentVariable, ...]
    environment_variable_data: Tuple[EnvironmentVariableData, ...]
    signal_types: Tuple[SignalType, ...]
    comments: Tuple[Comment, ...]
    attribute_definitions: Tuple[AttributeDefinition, ...]
    attribute_defaults: Tuple[AttributeDefault, ...]
    attribute_values: Tuple[AttributeValueForObject, ...]
    value_descriptions: Tuple[ValueDescription, ...]
    signal_type_refs: Tuple[SignalTypeRef, ...]
    signal_groups: Optional[SignalGroups]
    signal_extended_value_type_list: Optional[SignalExtendedValueTypeList]

    @property
    def node_names(self):
        return tuple(name for node in self.nodes for name in node.names)

    def message(self, message_id):
        """Returns the first message with id message_id, or None.

        """
        for message in self.messages:
            if message.id == message_id:
                return message
        return None


# --------------------------
# Parser
# --------------------------

class Parser:
    """Recursive descent parser for dbc files.

    Each grammar rule is a method that consumes a prefix of the remaining
    input and returns the value it recognized, or raises ParseError with the
    input position left unspecified. The combinators optional, any_number_of
    and one_of restore the position when a rule fails.

    A rule can be run on its own:
        parser = Parser()
        parser.feed(b'BU_: ECU1 ECU2\\n')
        node = parser.node()
        remaining = parser.rest()
    """
    def __init__(self):
        self.feed(b'')

    def feed(self, buffer):
        """Load input and move to its start.

        Args:
            buffer(bytes): dbc text. A str is encoded as utf-8.
        """
        if isinstance(buffer, str):
            buffer = buffer.encode('utf-8')
        # one character per byte so positions are byte offsets
        self.text = bytes(buffer).decode('latin-1')
        self.n = 0
        self.len = len(self.text)
        self.col = 0
        self.line = 1
        self.furthest = None

    def parse(self, buffer):
        """Parse a complete dbc file.

        Args:
            buffer(bytes): Content of dbc file.

        Returns:
            The Document.

        Raises:
            ParseError: A mandatory section did not match.
            Incomplete: Text remains after the last section recognized.
        """
        self.feed(buffer)
        document = self.document()
        if self.n < self.len:
            reason = self.furthest
            if reason is not None and reason.pos < self.n:
                reason = None
            raise Incomplete(document, self.rest(), self.line, self.col,
                             self.n, reason)
        return document

    def rest(self):
        """Return the input not consumed yet.

        """
        return self.text[self.n:].encode('latin-1')

    def getpos(self):
        """Return current position within input.

        The position is a tuple of character, line and column number.
        """
        return (self.n, self.line, self.col)

    def setpos(self, pos):
        """Set current position within input.

        Args: pos(tuple): Character, line and column number.
        """
        self.n, self.line, self.col = pos

    def _advance(self, k):
        chunk = self.text[self.n:self.n + k]
        nln = chunk.count('\n')
        if nln:
            self.line += nln
            self.col = k - 1 - chunk.rfind('\n')
        else:
            self.col += k
        self.n += k

    def _match(self, pattern):
        match = pattern.match(self.text, self.n)
        if match is None:
            return None
        s = match.group()
        self._advance(len(s))
        return s

    def _found(self):
        s = self.text[self.n:self.n + 10]
        return s.replace('\r', '\\r').replace('\n', '\\n')

    def _fail(self, expected):
        if self.n >= self.len:
            raise EndOfInputError(self.line, self.col, self.n,
                                  "Reached end while looking for {} at",
                                  expected)
        raise LexicalError(self.line, self.col, self.n,
                           "Expected {}, found \"{}\" at",
                           expected, self._found())

    def _remember(self, pe):
        if self.furthest is None or pe.pos >= self.furthest.pos:
            self.furthest = pe

    @contextmanager
    def construct(self, rule):
        """Report a mismatch after the keyword of rule as structural.

        """
        try:
            yield
        except LexicalError as le:
            raise StructuralError(rule, le) from le

    # *** combinators

    def optional(self, rule):
        pos = self.getpos()
        try:
            return rule()
        except ParseError as pe:
            self._remember(pe)
            self.setpos(pos)
            return None

    def any_number_of(self, rule):
        res = []
        while self.n < self.len:
            pos = self.getpos()
            try:
                res0 = rule()
            except ParseError as pe:
                self._remember(pe)
                self.setpos(pos)
                break
            res.append(res0)
            if self.n == pos[0]:
                break
        return res

    def one_of(self, *rules):
        pos = self.getpos()
        errors = []
        for rule in rules:
            try:
                return rule()
            except ParseError as pe:
                self._remember(pe)
                self.setpos(pos)
                errors.append(pe)
        raise AlternativeError(pos[1], pos[2], pos[0],
                               [rule.__name__.replace('_', ' ')
                                for rule in rules],
                               errors)

    def separated_list(self, rule, sep=','):
        """Parse one or more of rule separated by sep.

        """
        items = [rule()]
        items += self.any_number_of(lambda: self._separated(rule, sep))
        return items

    def _separated(self, rule, sep):
        self.eat_blanks()
        self.charmatch(sep)
        self.eat_blanks()
        return rule()

    # *** lexical core

    def eat_whitespace(self):
        self._match(_WHITESPACE)

    def eat_blanks(self):
        self._match(_BLANKS)

    def blank(self):
        """Match one or more spaces or tabs.

        """
        if not self._match(_BLANKS):
            self._fail('" "')

    def line_end(self):
        """Match the end of a line or of the input, after optional blanks.

        """
        self.eat_blanks()
        if self.n >= self.len:
            return
        if self.text.startswith('\r\n', self.n):
            self._advance(2)
        elif self.text[self.n] == '\n':
            self._advance(1)
        else:
            self._fail('end of line')

    def charmatch(self, c):
        if self.n < self.len and self.text[self.n] == c:
            self._advance(1)
            return c
        self._fail('"{}"'.format(c))

    def strmatch(self, s):
        if self.text.startswith(s, self.n):
            self._advance(len(s))
            return s
        self._fail('"{}"'.format(s))

    def identifier(self):
        """Match a C identifier: a letter or underscore followed by letters,
        digits and underscores.

        """
        s = self._match(_IDENTIFIER)
        if s is None:
            self._fail('identifier')
        return s

    def string(self):
        """Match a quoted string. There is no escape syntax; the string ends
        at the next quote.

        """
        line, col, n = self.line, self.col, self.n
        self.charmatch('"')
        end = self.text.find('"', self.n)
        if end < 0:
            self.setpos((n, line, col))
            raise EndOfInputError(line, col, n,
                                  "Reached end while parsing string "
                                  "starting at")
        s = self.text[self.n:end]
        self._advance(end - self.n + 1)
        return _decode(s)

    def uint(self):
        """Match an unsigned decimal integer that fits in 64 bits.

        """
        pos = self.getpos()
        s = self._match(_UINT)
        if s is None:
            self._fail('unsigned int')
        # length first, int() refuses very long digit runs
        if len(s) > _U64_DIGITS or int(s) > _U64_MAX:
            self.setpos(pos)
            self._fail('64-bit unsigned int')
        return int(s)

    def sint(self):
        """Match a signed decimal integer that fits in 64 bits.

        """
        pos = self.getpos()
        s = self._match(_SINT)
        if s is None:
            self._fail('signed integer')
        if (len(s.lstrip('+-')) > _I64_DIGITS
                or not _I64_MIN <= int(s) <= _I64_MAX):
            self.setpos(pos)
            self._fail('64-bit signed integer')
        return int(s)

    def double(self):
        s = self._match(_DOUBLE)
        if s is None:
            self._fail('floating point')
        return float(s)

    # *** scalar domains

    def _code(self, enum, expected):
        if self.n < self.len:
            for member in enum:
                if member.value == self.text[self.n]:
                    self._advance(1)
                    return member
        self._fail(expected)

    def byte_order(self):
        return self._code(ByteOrder, '"0" or "1"')

    def value_type(self):
        return self._code(ValueType, '"+" or "-"')

    def env_var_type(self):
        return self._code(EnvType, 'one of "012"')

    def access_type(self):
        self.strmatch('DUMMY_NODE_VECTOR')
        return self._code(AccessType, 'one of "0123"')

    def signal_extended_value_type(self):
        return self._code(SignalExtendedValueType, 'one of "012"')

    def message_id(self):
        return self.uint()

    def transmitter(self):
        name = self.identifier()
        if name == NO_NODE:
            return NoTransmitter()
        return NodeTransmitter(name)

    def access_node(self):
        name = self.identifier()
        if name in _NO_ACCESS_NODE:
            return NoAccessNode()
        return NamedAccessNode(name)

    def multiplexed_signal(self):
        self.charmatch(' ')
        self.charmatch('m')
        value = self.uint()
        self.charmatch(' ')
        return MultiplexedSignal(value)

    def multiplexor(self):
        self.charmatch(' ')
        self.charmatch('M')
        self.charmatch(' ')
        return Multiplexor()

    def plain(self):
        self.charmatch(' ')
        return Plain()

    def multiplexer_indicator(self):
        # plain matches a prefix of the others, so it goes last
        return self.one_of(self.multiplexed_signal, self.multiplexor,
                           self.plain)

    # *** entity grammars

    def version(self):
        self.eat_whitespace()
        self.strmatch('VERSION')
        with self.construct('VERSION'):
            self.blank()
            version = self.string()
            self.line_end()
        return version

    def symbol(self):
        self.blank()
        name = self.identifier()
        self.line_end()
        return name

    def new_symbols(self):
        self.eat_whitespace()
        self.strmatch('NS_')
        with self.construct('NS_'):
            self.eat_blanks()
            self.charmatch(':')
            self.line_end()
        return tuple(self.any_number_of(self.symbol))

    def btr(self):
        """Match the ': btr1, btr2' bit timing register tail of BS_.

        """
        self.eat_blanks()
        self.charmatch(':')
        self.eat_blanks()
        btr1 = self.uint()
        self.eat_blanks()
        self.charmatch(',')
        self.eat_blanks()
        return (btr1, self.uint())

    def baudrates(self):
        self.blank()
        rates = self.separated_list(self.uint)
        # register values are read but not kept
        self.optional(self.btr)
        return rates

    def bit_timing(self):
        self.eat_whitespace()
        self.strmatch('BS_')
        with self.construct('BS_'):
            self.eat_blanks()
            self.charmatch(':')
        return tuple(self.optional(self.baudrates) or ())

    def _blank_identifier(self):
        self.blank()
        return self.identifier()

    def node(self):
        self.eat_whitespace()
        self.strmatch('BU_')
        with self.construct('BU_'):
            self.eat_blanks()
            self.charmatch(':')
            names = self.any_number_of(self._blank_identifier)
            self.line_end()
        return Node(tuple(names))

    def value_label(self):
        value = self.double()
        self.blank()
        label = self.string()
        return ValueLabel(value, label)

    def _blank_value_label(self):
        self.blank()
        return self.value_label()

    def value_labels(self):
        """Parse value/label pairs up to and including the terminating
        semicolon.

        """
        labels = self.any_number_of(self._blank_value_label)
        self.eat_blanks()
        self.charmatch(';')
        self.line_end()
        return tuple(labels)

    def value_table(self):
        self.eat_whitespace()
        self.strmatch('VAL_TABLE_')
        with self.construct('VAL_TABLE_'):
            self.blank()
            name = self.identifier()
            labels = self.value_labels()
        return ValueTable(name, labels)

    def signal(self):
        self.eat_whitespace()
        self.strmatch('SG_')
        with self.construct('SG_'):
            self.blank()
            name = self.identifier()
            indicator = self.multiplexer_indicator()
            self.eat_blanks()
            self.charmatch(':')
            self.eat_blanks()
            start_bit = self.uint()
            self.charmatch('|')
            size = self.uint()
            self.charmatch('@')
            byte_order = self.byte_order()
            value_type = self.value_type()
            self.blank()
            self.charmatch('(')
            factor = self.double()
            self.charmatch(',')
            offset = self.double()
            self.charmatch(')')
            self.blank()
            self.charmatch('[')
            minimum = self.double()
            self.charmatch('|')
            maximum = self.double()
            self.charmatch(']')
            self.blank()
            unit = self.string()
            self.blank()
            receivers = self.separated_list(self.identifier)
            self.line_end()
        return Signal(name, indicator, start_bit, size, byte_order,
                      value_type, factor, offset, minimum, maximum, unit,
                      tuple(receivers))

    def message(self):
        """Parse a BO_ header and the SG_ lines following it.

        Signals are collected until a line does not match the signal
        grammar; that line is left for the next rule.
        """
        self.eat_whitespace()
        self.strmatch('BO_')
        with self.construct('BO_'):
            self.blank()
            message_id = self.message_id()
            self.blank()
            name = self.identifier()
            self.eat_blanks()
            self.charmatch(':')
            self.blank()
            size = self.uint()
            self.blank()
            transmitter = self.transmitter()
        signals = self.any_number_of(self.signal)
        return Message(message_id, name, size, transmitter, tuple(signals))

    def message_transmitter(self):
        self.eat_whitespace()
        self.strmatch('BO_TX_BU_')
        with self.construct('BO_TX_BU_'):
            self.blank()
            message_id = self.message_id()
            self.eat_blanks()
            self.charmatch(':')
            self.eat_blanks()
            transmitters = self.separated_list(self.transmitter)
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return MessageTransmitter(message_id, tuple(transmitters))

    def environment_variable(self):
        self.eat_whitespace()
        self.strmatch('EV_')
        with self.construct('EV_'):
            self.blank()
            name = self.identifier()
            self.eat_blanks()
            self.charmatch(':')
            self.blank()
            env_type = self.env_var_type()
            self.blank()
            self.charmatch('[')
            minimum = self.sint()
            self.charmatch('|')
            maximum = self.sint()
            self.charmatch(']')
            self.blank()
            unit = self.string()
            self.blank()
            initial_value = self.double()
            self.blank()
            ev_id = self.sint()
            self.blank()
            access_type = self.access_type()
            self.blank()
            access_nodes = self.separated_list(self.access_node)
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return EnvironmentVariable(name, env_type, minimum, maximum, unit,
                                   initial_value, ev_id, access_type,
                                   tuple(access_nodes))

    def environment_variable_data(self):
        self.eat_whitespace()
        self.strmatch('ENVVAR_DATA_')
        with self.construct('ENVVAR_DATA_'):
            self.blank()
            name = self.identifier()
            self.eat_blanks()
            self.charmatch(':')
            self.eat_blanks()
            size = self.uint()
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return EnvironmentVariableData(name, size)

    def signal_type(self):
        self.eat_whitespace()
        self.strmatch('SGTYPE_')
        with self.construct('SGTYPE_'):
            self.blank()
            name = self.identifier()
            self.eat_blanks()
            self.charmatch(':')
            self.eat_blanks()
            size = self.uint()
            self.charmatch('@')
            byte_order = self.byte_order()
            value_type = self.value_type()
            self.blank()
            self.charmatch('(')
            factor = self.double()
            self.charmatch(',')
            offset = self.double()
            self.charmatch(')')
            self.blank()
            self.charmatch('[')
            minimum = self.double()
            self.charmatch('|')
            maximum = self.double()
            self.charmatch(']')
            self.blank()
            unit = self.string()
            self.blank()
            default_value = self.double()
            self.blank()
            value_table = self.identifier()
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return SignalType(name, size, byte_order, value_type, factor, offset,
                          minimum, maximum, unit, default_value, value_table)

    def signal_type_ref(self):
        self.eat_whitespace()
        if self.text.startswith('SIG_TYPE_REF_', self.n):
            keyword = self.strmatch('SIG_TYPE_REF_')
        else:
            keyword = self.strmatch('SGTYPE_')
        with self.construct(keyword):
            self.blank()
            message_id = self.message_id()
            self.blank()
            signal_name = self.identifier()
            self.eat_blanks()
            self.charmatch(':')
            self.eat_blanks()
            signal_type_name = self.identifier()
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return SignalTypeRef(message_id, signal_name, signal_type_name)

    def _group_member(self):
        self._match(_GROUP_SEPARATOR)
        return self.identifier()

    def signal_groups(self):
        self.eat_whitespace()
        self.strmatch('SIG_GROUP_')
        with self.construct('SIG_GROUP_'):
            self.blank()
            message_id = self.message_id()
            self.blank()
            name = self.identifier()
            self.blank()
            repetitions = self.uint()
            self.eat_blanks()
            self.charmatch(':')
            signal_names = self.any_number_of(self._group_member)
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return SignalGroups(message_id, name, repetitions,
                            tuple(signal_names))

    def signal_extended_value_type_list(self):
        self.eat_whitespace()
        self.strmatch('SIG_VALTYPE_')
        with self.construct('SIG_VALTYPE_'):
            self.blank()
            message_id = self.message_id()
            self.blank()
            signal_name = self.identifier()
            self.eat_blanks()
            if self.text.startswith(':', self.n):
                self._advance(1)
                self.eat_blanks()
            value_type = self.signal_extended_value_type()
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return SignalExtendedValueTypeList(message_id, signal_name,
                                           value_type)

    # *** annotation grammars

    def node_comment(self):
        self.strmatch('BU_')
        self.blank()
        node_name = self.identifier()
        self.blank()
        return NodeComment(node_name, self.string())

    def message_comment(self):
        self.strmatch('BO_')
        self.blank()
        message_id = self.message_id()
        self.blank()
        return MessageComment(message_id, self.string())

    def env_var_comment(self):
        self.strmatch('EV_')
        self.blank()
        env_var_name = self.identifier()
        self.blank()
        return EnvVarComment(env_var_name, self.string())

    def signal_comment(self):
        self.strmatch('SG_')
        self.blank()
        message_id = self.message_id()
        self.blank()
        signal_name = self.identifier()
        self.blank()
        return SignalComment(message_id, signal_name, self.string())

    def plain_comment(self):
        return PlainComment(self.string())

    def comment(self):
        self.eat_whitespace()
        self.strmatch('CM_')
        with self.construct('CM_'):
            self.blank()
            comment = self.one_of(self.node_comment, self.message_comment,
                                  self.env_var_comment, self.signal_comment,
                                  self.plain_comment)
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return comment

    def definition_text(self):
        """Match the text up to the next semicolon outside quotes.

        """
        n = self.n
        quoted = False
        while n < self.len:
            if (c := self.text[n]) == '"':
                quoted = not quoted
            elif c == ';' and not quoted:
                break
            n += 1
        else:
            self._advance(n - self.n)
            self._fail('";"')
        s = self.text[self.n:n]
        self._advance(n - self.n)
        return _decode(s)

    def node_attribute_definition(self):
        self.strmatch('BU_')
        self.blank()
        return NodeAttributeDefinition(self.definition_text())

    def signal_attribute_definition(self):
        self.strmatch('SG_')
        self.blank()
        return SignalAttributeDefinition(self.definition_text())

    def env_var_attribute_definition(self):
        self.strmatch('EV_')
        self.blank()
        return EnvVarAttributeDefinition(self.definition_text())

    def message_attribute_definition(self):
        self.strmatch('BO_')
        self.blank()
        return MessageAttributeDefinition(self.definition_text())

    def plain_attribute_definition(self):
        self.eat_blanks()
        return PlainAttributeDefinition(self.definition_text())

    def attribute_definition(self):
        self.eat_whitespace()
        self.strmatch('BA_DEF_')
        with self.construct('BA_DEF_'):
            self.blank()
            definition = self.one_of(self.node_attribute_definition,
                                     self.signal_attribute_definition,
                                     self.env_var_attribute_definition,
                                     self.message_attribute_definition,
                                     self.plain_attribute_definition)
            self.charmatch(';')
            self.line_end()
        return definition

    def attribute_value_float(self):
        return self.double()

    def attribute_value_string(self):
        return self.string()

    def attribute_value(self):
        # numbers are always read as floating point, integer forms are not
        # tried
        return self.one_of(self.attribute_value_float,
                           self.attribute_value_string)

    def _blank_attribute_value(self):
        self.blank()
        return self.attribute_value()

    def attribute_default(self):
        self.eat_whitespace()
        self.strmatch('BA_DEF_DEF_')
        with self.construct('BA_DEF_DEF_'):
            self.blank()
            name = self.string()
            self.blank()
            value = self.attribute_value()
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return AttributeDefault(name, value)

    def node_attribute_value(self):
        self.strmatch('BU_')
        self.blank()
        node_name = self.identifier()
        self.blank()
        return NodeAttributeValue(node_name, self.attribute_value())

    def message_attribute_value(self):
        self.strmatch('BO_')
        self.blank()
        message_id = self.message_id()
        value = self.optional(self._blank_attribute_value)
        return MessageAttributeValue(message_id, value)

    def signal_attribute_value(self):
        self.strmatch('SG_')
        self.blank()
        message_id = self.message_id()
        self.blank()
        signal_name = self.identifier()
        self.blank()
        return SignalAttributeValue(message_id, signal_name,
                                    self.attribute_value())

    def env_var_attribute_value(self):
        self.strmatch('EV_')
        self.blank()
        env_var_name = self.identifier()
        self.blank()
        return EnvVarAttributeValue(env_var_name, self.attribute_value())

    def raw_attribute_value(self):
        return RawAttributeValue(self.attribute_value())

    def attribute_value_for_object(self):
        self.eat_whitespace()
        self.strmatch('BA_')
        with self.construct('BA_'):
            self.blank()
            name = self.string()
            self.blank()
            target = self.one_of(self.node_attribute_value,
                                 self.message_attribute_value,
                                 self.signal_attribute_value,
                                 self.env_var_attribute_value,
                                 self.raw_attribute_value)
            self.eat_blanks()
            self.charmatch(';')
            self.line_end()
        return AttributeValueForObject(name, target)

    def signal_value_description(self):
        message_id = self.message_id()
        self.blank()
        signal_name = self.identifier()
        return SignalValueDescription(message_id, signal_name,
                                      self.value_labels())

    def env_var_value_description(self):
        env_var_name = self.identifier()
        return EnvVarValueDescription(env_var_name, self.value_labels())

    def value_description(self):
        self.eat_whitespace()
        self.strmatch('VAL_')
        with self.construct('VAL_'):
            self.blank()
            return self.one_of(self.signal_value_description,
                               self.env_var_value_description)

    # *** attribute definition domains

    def ba_int(self):
        self.strmatch('INT')
        self.blank()
        val1 = self.sint()
        self.blank()
        val2 = self.sint()
        return IntDomain(val1, val2)

    def ba_hex(self):
        self.strmatch('HEX')
        self.blank()
        val1 = self.sint()
        self.blank()
        val2 = self.sint()
        return HexDomain(val1, val2)

    def ba_float(self):
        self.strmatch('FLOAT')
        self.blank()
        val1 = self.double()
        self.blank()
        val2 = self.double()
        return FloatDomain(val1, val2)

    def ba_string(self):
        self.strmatch('STRING')
        return StringDomain()

    def ba_enum(self):
        self.strmatch('ENUM')
        self.eat_blanks()
        labels = self.optional(lambda: self.separated_list(self.string))
        return EnumDomain(tuple(labels or ()))

    def attribute_definition_body(self, text):
        """Decode the text of an attribute definition.

        Args:
            text(str): Definition text, e.g. '"Name" INT 0 10'.

        Returns:
            Tuple of attribute name and value domain.
        """
        self.feed(text)
        self.eat_whitespace()
        name = self.string()
        self.blank()
        domain = self.one_of(self.ba_float, self.ba_int, self.ba_hex,
                             self.ba_string, self.ba_enum)
        self.eat_whitespace()
        if self.n < self.len:
            self._fail('end of attribute definition')
        return name, domain

    # *** document assembler

    def section(self, rule):
        entries = self.any_number_of(rule)
        logger.debug("%s: %d parsed, stopped at line %d, column %d",
                     rule.__name__, len(entries), self.line, self.col)
        return tuple(entries)

    def optional_section(self, rule):
        entry = self.optional(rule)
        logger.debug("%s: %d parsed, stopped at line %d, column %d",
                     rule.__name__, 0 if entry is None else 1, self.line,
                     self.col)
        return entry

    def document(self):
        """Parse all sections in their fixed order.

        Version and new symbols are mandatory; every other section is
        optional or repeated as long as it matches.
        """
        version = self.version()
        new_symbols = self.new_symbols()
        bit_timing = self.optional_section(self.bit_timing)
        nodes = self.section(self.node)
        value_tables = self.section(self.value_table)
        messages = self.section(self.message)
        message_transmitters = self.section(self.message_transmitter)
        environment_variables = self.section(self.environment_variable)
        environment_variable_data = self.section(
            self.environment_variable_data)
        signal_types = self.section(self.signal_type)
        comments = self.section(self.comment)
        attribute_definitions = self.section(self.attribute_definition)
        attribute_defaults = self.section(self.attribute_default)
        attribute_values = self.section(self.attribute_value_for_object)
        value_descriptions = self.section(self.value_description)
        signal_type_refs = self.section(self.signal_type_ref)
        signal_groups = self.optional_section(self.signal_groups)
        signal_extended_value_type_list = self.optional_section(
            self.signal_extended_value_type_list)
        self.eat_whitespace()
        return Document(version, new_symbols, bit_timing, nodes,
                        value_tables, messages, message_transmitters,
                        environment_variables, environment_variable_data,
                        signal_types, comments, attribute_definitions,
                        attribute_defaults, attribute_values,
                        value_descriptions, signal_type_refs, signal_groups,
                        signal_extended_value_type_list)


def parse(buffer):
    """Parse the content of a dbc file.

    Args:
        buffer(bytes): Content of dbc file.

    Returns:
        The Document.

    Raises:
        ParseError: A mandatory section did not match.
        Incomplete: Text remains after the last section recognized; the
                    partial document is in its document attribute.
    """
    return Parser().parse(buffer)


# --------------------------
# Reference check
# --------------------------

def check_references(document, strict=False):
    """Report references in document that do not resolve.

    Message ids, signal, node, environment variable and value table names
    used by one section are looked up among those declared by others.

    Args:
        document(Document): Parsed document.
        strict(bool):       If True, raise DatabaseError on the first
                            problem instead of warning.

    Returns:
        List of problem descriptions, in document order.
    """
    problems = []

    def report(msg):
        if strict:
            raise DatabaseError(msg)
        warnings.warn(msg, DatabaseWarning)
        problems.append(msg)

    nodes = set(document.node_names)
    nodes.add(NO_NODE)
    messages = {}
    for msg in document.messages:
        messages.setdefault(msg.id, msg)
    env_vars = set(ev.name for ev in document.environment_variables)
    tables = set(vt.name for vt in document.value_tables)

    def check_node(name, where):
        if name not in nodes:
            report("{} refers to undefined node \"{}\"".format(where, name))

    def check_signal(msg_id, signame, where):
        if msg_id not in messages:
            report("{} refers to undefined message id \"{}\"".format(
                where, msg_id))
        elif messages[msg_id].signal(signame) is None:
            report("{} refers to undefined signal \"{}\" in message "
                   "\"{}\"".format(where, signame, msg_id))

    def check_message(msg_id, where):
        if msg_id not in messages:
            report("{} refers to undefined message id \"{}\"".format(
                where, msg_id))

    def check_env_var(name, where):
        if name not in env_vars:
            report("{} refers to undefined environment variable "
                   "\"{}\"".format(where, name))

    for msg in document.messages:
        if isinstance(msg.transmitter, NodeTransmitter):
            check_node(msg.transmitter.node_name,
                       "message \"{}\"".format(msg.id))
        for sig in msg.signals:
            for r in sig.receivers:
                check_node(r, "signal \"{}\" in message \"{}\"".format(
                    sig.name, msg.id))
    for bo in document.message_transmitters:
        where = "BO_TX_BU_ for message \"{}\"".format(bo.message_id)
        check_message(bo.message_id, where)
        for tx in bo.transmitters:
            if isinstance(tx, NodeTransmitter):
                check_node(tx.node_name, where)
    for ev in document.environment_variables:
        for node in ev.access_nodes:
            if isinstance(node, NamedAccessNode):
                check_node(node.node_name,
                           "environment variable \"{}\"".format(ev.name))
    for data in document.environment_variable_data:
        check_env_var(data.name, "ENVVAR_DATA_")
    for st in document.signal_types:
        if st.value_table not in tables:
            report("signal type \"{}\" refers to undefined value table "
                   "\"{}\"".format(st.name, st.value_table))
    for c in document.comments:
        if isinstance(c, NodeComment):
            check_node(c.node_name, "comment")
        elif isinstance(c, MessageComment):
            check_message(c.message_id, "comment")
        elif isinstance(c, SignalComment):
            check_signal(c.message_id, c.signal_name, "comment")
        elif isinstance(c, EnvVarComment):
            check_env_var(c.env_var_name, "comment")
    for av in document.attribute_values:
        where = "attribute value \"{}\"".format(av.name)
        t = av.target
        if isinstance(t, NodeAttributeValue):
            check_node(t.node_name, where)
        elif isinstance(t, MessageAttributeValue):
            check_message(t.message_id, where)
        elif isinstance(t, SignalAttributeValue):
            check_signal(t.message_id, t.signal_name, where)
        elif isinstance(t, EnvVarAttributeValue):
            check_env_var(t.env_var_name, where)
    for vd in document.value_descriptions:
        if isinstance(vd, SignalValueDescription):
            check_signal(vd.message_id, vd.signal_name, "value description")
        else:
            check_env_var(vd.env_var_name, "value description")
    for ref in document.signal_type_refs:
        check_signal(ref.message_id, ref.signal_name, "signal type reference")
    groups = document.signal_groups
    if groups is not None:
        for signame in groups.signal_names:
            check_signal(groups.message_id, signame,
                         "signal group \"{}\"".format(groups.name))
    valtype = document.signal_extended_value_type_list
    if valtype is not None:
        check_signal(valtype.message_id, valtype.signal_name,
                     "SIG_VALTYPE_")
    return problems
