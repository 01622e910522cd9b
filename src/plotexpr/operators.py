'''
Operator grammar and operator semantics.

The grammar (arity, precedence, associativity) is fixed. What an operator
*does* comes from an OperatorTable: REAL works on floats, COMPLEX on complex
numbers. Tokens are bound to a table's actions when lexed, and can be
re-bound to another table without lexing again.
'''

from collections import namedtuple
import operator
import cmath
import math

from .util import ieee


OperatorSpec = namedtuple('OperatorSpec', 'symbol arity precedence right')

GRAMMAR = {spec.symbol: spec for spec in [
    # Structural; actions are never looked up for these.
    OperatorSpec('(', 0, 0, False),
    OperatorSpec(')', 0, 0, False),
    OperatorSpec(',', 2, 1, False),
    # Executed by the machine, which owns the scopes.
    OperatorSpec('=', 2, 3, True),
    OperatorSpec('==', 2, 9, False),
    OperatorSpec('!=', 2, 9, False),
    OperatorSpec('<', 2, 10, False),
    OperatorSpec('<=', 2, 10, False),
    OperatorSpec('>', 2, 10, False),
    OperatorSpec('>=', 2, 10, False),
    OperatorSpec('+', 2, 14, False),
    OperatorSpec('-', 2, 14, False),
    OperatorSpec('*', 2, 15, False),
    OperatorSpec('/', 2, 15, False),
    OperatorSpec('%', 2, 15, False),
    OperatorSpec('**', 2, 16, True),
    # Yes, above **: -2**2 is 4.
    OperatorSpec('u+', 1, 17, True),
    OperatorSpec('u-', 1, 17, True),
    OperatorSpec('!', 1, 17, True),
]}

# Lexemes, longest first so ** wins over *.
SYMBOLS = sorted((symbol for symbol in GRAMMAR if not symbol.startswith('u')),
                 key=len, reverse=True)


class OperatorTable:
    '''
    Named set of operator actions over one numeric domain.

    :param name: Short name, also used to key per-table caches.
    :param coerce: Moves a bare result (int, bool, float) into the domain.
    :param actions: Operator symbol to callable.
    :param imag: Default imaginary suffix for literals, or None.
    '''

    def __init__(self, name, coerce, actions, imag=None):
        self.name = name
        self.coerce = coerce
        self.actions = actions
        self.imag = imag

    def __getitem__(self, symbol):
        return self.actions[symbol]

    def get(self, symbol):
        return self.actions.get(symbol)

    def __repr__(self):
        return '<OperatorTable {}>'.format(self.name)


def _sequence(left, right):
    return right


def _real(value):
    if isinstance(value, (bool, int, float)):
        return float(value)
    return value


def _complex(value):
    if isinstance(value, (bool, int, float, complex)):
        return complex(value)
    return value


def _real_divide(left, right):
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


@ieee()
def _real_power(left, right):
    if left == 0 and right < 0:
        return math.inf
    return math.pow(left, right)


@ieee()
def _real_modulo(left, right):
    return math.fmod(left, right)


COMPLEX_NAN = complex(math.nan, math.nan)
COMPLEX_INF = complex(math.inf, 0)


@ieee(COMPLEX_NAN, COMPLEX_INF)
def _complex_divide(left, right):
    if right == 0:
        if left == 0 or cmath.isnan(left):
            return COMPLEX_NAN
        return COMPLEX_INF
    return complex(left) / complex(right)


@ieee(COMPLEX_NAN, COMPLEX_INF)
def _complex_power(left, right):
    return complex(left) ** complex(right)


@ieee(COMPLEX_NAN, COMPLEX_INF)
def _complex_modulo(left, right):
    '''
    Remainder against the floored (component-wise) complex quotient.
    '''
    quotient = complex(left) / complex(right)
    floored = complex(math.floor(quotient.real), math.floor(quotient.imag))
    return left - right * floored


def _compare(compare, coerce, key=None):
    def action(left, right):
        if key is not None:
            left, right = key(left), key(right)
        return coerce(compare(left, right))
    return action


def _real_part(value):
    return complex(value).real


REAL = OperatorTable('real', _real, {
    ',': _sequence,
    '+': operator.__add__,
    '-': operator.__sub__,
    '*': operator.__mul__,
    '/': _real_divide,
    '%': _real_modulo,
    '**': _real_power,
    'u+': operator.__pos__,
    'u-': operator.__neg__,
    '!': lambda value: float(not value or math.isnan(value)),
    '==': _compare(operator.__eq__, float),
    '!=': _compare(operator.__ne__, float),
    '<': _compare(operator.__lt__, float),
    '<=': _compare(operator.__le__, float),
    '>': _compare(operator.__gt__, float),
    '>=': _compare(operator.__ge__, float),
})

# Complex numbers aren't ordered; relational operators compare real parts.
COMPLEX = OperatorTable('complex', _complex, {
    ',': _sequence,
    '+': operator.__add__,
    '-': operator.__sub__,
    '*': operator.__mul__,
    '/': _complex_divide,
    '%': _complex_modulo,
    '**': _complex_power,
    'u+': operator.__pos__,
    'u-': operator.__neg__,
    '!': lambda value: complex(value == 0 or cmath.isnan(value)),
    '==': _compare(operator.__eq__, complex),
    '!=': _compare(operator.__ne__, complex),
    '<': _compare(operator.__lt__, complex, _real_part),
    '<=': _compare(operator.__le__, complex, _real_part),
    '>': _compare(operator.__gt__, complex, _real_part),
    '>=': _compare(operator.__ge__, complex, _real_part),
}, imag='i')

TABLES = {table.name: table for table in (REAL, COMPLEX)}
