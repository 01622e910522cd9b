'''
Expression engine of the function plotter.

Infix arithmetic over real or complex numbers: literals with radix prefixes,
digit separators and imaginary suffixes; variables and assignment; native
and user-defined functions with default arguments; diagnostics that point
at the offending source and show the call stack.

Every curve, condition and level-set of the plotter is "evaluate this
expression at point P", so an Expression is parsed once and evaluated many
times with different bindings:

    >>> environment = library.install(Environment())
    >>> expression = Expression('x ** 2 + 1', environment).parse()
    >>> expression.set_symbol('x', 3)
    3
    >>> expression.evaluate()
    10.0
'''

from .util import (RPNError, ExpressionError, LexError, ExpressionSyntaxError,
                   StackUnderflow, UnboundSymbol, AssignToConstant,
                   ArityMismatch, MissingArgument, NotCallable,
                   ResultStackImbalance, RecursionLimitExceeded,
                   InvalidOperand, NativeError)
from .literal import NumberOptions, parse_number
from .operators import REAL, COMPLEX, TABLES, OperatorTable
from .lexer import Lexer
from .scope import Environment, NativeFunction, UserFunction
from .machine import Expression
from .sampler import sample
from .cli import CLI
from . import library


__all__ = (
    'Expression', 'Environment', 'NativeFunction', 'UserFunction', 'Lexer',
    'NumberOptions', 'parse_number', 'OperatorTable', 'REAL', 'COMPLEX',
    'TABLES', 'sample', 'library', 'CLI',
    'RPNError', 'ExpressionError', 'LexError', 'ExpressionSyntaxError',
    'StackUnderflow', 'UnboundSymbol', 'AssignToConstant', 'ArityMismatch',
    'MissingArgument', 'NotCallable', 'ResultStackImbalance',
    'RecursionLimitExceeded', 'InvalidOperand', 'NativeError',
)
