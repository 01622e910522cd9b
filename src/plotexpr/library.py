'''
Standard constants and functions, registered explicitly into an Environment.

Real functions come from math, complex ones from cmath. Both are wrapped so
domain errors and overflow give NaN and inf instead of aborting a plot.
'''

import cmath
import math

from .util import ieee
from .operators import COMPLEX_NAN, COMPLEX_INF


_real = ieee()
_complex = ieee(COMPLEX_NAN, COMPLEX_INF)


def sign(x):
    '''
    -1, 0 or 1, NaN for NaN.
    '''
    if x != x:
        return x
    return (x > 0) - (x < 0)


def factorial(x):
    '''
    Gamma(x + 1), so non-integers plot too.
    '''
    return math.gamma(x + 1)


def re(z):
    return complex(z).real


def im(z):
    return complex(z).imag


def conj(z):
    return complex(z).conjugate()


CONSTANTS = {
    'pi': math.pi,
    'e': math.e,
    'tau': math.tau,
    'inf': math.inf,
    'nan': math.nan,
}

MATH = {
    'abs': abs,
    'acos': _real(math.acos),
    'acosh': _real(math.acosh),
    'asin': _real(math.asin),
    'asinh': _real(math.asinh),
    'atan': _real(math.atan),
    'atan2': _real(math.atan2),
    'atanh': _real(math.atanh),
    'ceil': _real(math.ceil),
    'cos': _real(math.cos),
    'cosh': _real(math.cosh),
    'degrees': _real(math.degrees),
    'erf': _real(math.erf),
    'erfc': _real(math.erfc),
    'exp': _real(math.exp),
    'factorial': _real(factorial),
    'floor': _real(math.floor),
    'gamma': _real(math.gamma),
    'hypot': _real(math.hypot),
    'ln': _real(math.log),
    'log': _real(math.log),
    'log10': _real(math.log10),
    'log2': _real(math.log2),
    'max': max,
    'min': min,
    'radians': _real(math.radians),
    'sign': sign,
    'sin': _real(math.sin),
    'sinh': _real(math.sinh),
    'sqrt': _real(math.sqrt),
    'tan': _real(math.tan),
    'tanh': _real(math.tanh),
    'trunc': _real(math.trunc),
}

CMATH = {
    'abs': abs,
    'acos': _complex(cmath.acos),
    'acosh': _complex(cmath.acosh),
    'arg': cmath.phase,
    'asin': _complex(cmath.asin),
    'asinh': _complex(cmath.asinh),
    'atan': _complex(cmath.atan),
    'atanh': _complex(cmath.atanh),
    'conj': conj,
    'cos': _complex(cmath.cos),
    'cosh': _complex(cmath.cosh),
    'exp': _complex(cmath.exp),
    'im': im,
    'ln': _complex(cmath.log),
    'log': _complex(cmath.log),
    'log10': _complex(cmath.log10),
    'phase': cmath.phase,
    're': re,
    'rect': _complex(cmath.rect),
    'sin': _complex(cmath.sin),
    'sinh': _complex(cmath.sinh),
    'sqrt': _complex(cmath.sqrt),
    'tan': _complex(cmath.tan),
    'tanh': _complex(cmath.tanh),
}


def install(environment, complex=False, replace=False):
    '''
    Register constants and the math (or cmath) functions.

    :param environment: Environment to fill.
    :param complex: Use cmath versions.
    :param replace: Overwrite existing entries instead of refusing.
    :returns: environment.
    '''
    for name, value in CONSTANTS.items():
        environment.set(name, value, replace=replace)
    for name, func in (CMATH if complex else MATH).items():
        environment.register(func, name, replace=replace)
    return environment
