'''
Symbol tables.

An Environment holds the constants and functions of a host session and is
shared, on purpose, by every Expression of that session. Frames hold the
locals of one call; each Expression owns its own stack of them.
'''

from collections import namedtuple
from inspect import signature as getsignature, Parameter
from numbers import Number

import regex

from .util import AssignToConstant, ExpressionSyntaxError
from .literal import DEFAULT_OPTIONS, parse_number
from .parser import compile_source


MAIN = '_MAIN'
REQUIRED = Parameter.empty

Param = namedtuple('Param', 'name default', defaults=(REQUIRED,))


class Frame:
    '''
    Locals of one call. call is the Call token that entered it, if any.
    '''
    __slots__ = 'name', 'symbols', 'call'

    def __init__(self, name=MAIN, call=None):
        self.name = name
        self.symbols = {}
        self.call = call

    def __repr__(self):
        return '<Frame {} {}>'.format(self.name, sorted(self.symbols))


def _params(params):
    '''
    Normalize names, (name, default) pairs and Params to a list of Params.
    '''
    normalized = []
    for param in params:
        if isinstance(param, str):
            normalized.append(Param(param))
        else:
            normalized.append(Param(*param))
    return normalized


class NativeFunction:
    '''
    Python callable exposed to expressions.

    :param func: The callable.
    :param name: Name in expressions, default func.__name__.
    :param params: Parameter names or (name, default) pairs. Introspected
                   when None; variadic or opaque callables take any number
                   of arguments (params stays None).
    '''

    def __init__(self, func, name=None, params=None):
        self.func = func
        self.name = name or func.__name__
        self.params = self._introspect(func) if params is None \
            else _params(params)

    @staticmethod
    def _introspect(func):
        try:
            signature = getsignature(func)
        except (TypeError, ValueError):
            # Some builtins still have no signature.
            return None
        params = []
        for parameter in signature.parameters.values():
            if parameter.kind in (Parameter.VAR_POSITIONAL,
                                  Parameter.VAR_KEYWORD):
                return None
            if parameter.kind != Parameter.KEYWORD_ONLY:
                params.append(Param(parameter.name, parameter.default))
        return params

    def __call__(self, *args):
        return self.func(*args)

    def __repr__(self):
        return '<NativeFunction {}>'.format(self.name)


class UserFunction:
    '''
    Function written in the expression language itself.

    The body is parsed on first call and cached per operator table and
    literal options, since one function can serve real and complex
    expressions of the same session.
    '''

    def __init__(self, name, params, body):
        self.name = name
        self.params = _params(params)
        self.body = body
        self._compiled = {}

    def compile(self, lexer):
        key = lexer.operators.name, lexer.options
        rpn = self._compiled.get(key)
        if rpn is None:
            rpn = self._compiled[key] = compile_source(self.body, lexer)
        return rpn

    def __repr__(self):
        return '<UserFunction {}({})>'.format(
            self.name, ', '.join(param.name for param in self.params))


DEFINITION = regex.compile(r'''
    \s* (?<name>[A-Za-z_$][A-Za-z0-9_$]*) \s*
    \( (?<params>[^()]*) \) \s*
    =(?!=) \s*
    (?<body>.*?) \s* $
    ''', flags=regex.VERSION1 | regex.VERBOSE | regex.DOTALL)
PARAM = regex.compile(r'\s*(?<name>[A-Za-z_$][A-Za-z0-9_$]*)\s*'
                      r'(?:=\s*(?<default>\S.*?))?\s*$',
                      flags=regex.VERSION1 | regex.DOTALL)


def parse_definition(definition, options=DEFAULT_OPTIONS):
    '''
    Parse `name(a, b=2) = body` into a UserFunction.

    Defaults must be numeric literals, in the grammar options describe.
    '''
    match = DEFINITION.match(definition)
    if match is None or not match.group('body'):
        raise ExpressionSyntaxError(
            "Syntax Error: expected 'name(params) = body', got {!r}"
            .format(definition))
    params = []
    text = match.group('params')
    for item in text.split(',') if text.strip() else ():
        param = PARAM.match(item)
        if param is None:
            raise ExpressionSyntaxError(
                'Syntax Error: bad parameter {!r}'.format(item.strip()))
        if param.group('default') is None:
            if params and params[-1].default is not REQUIRED:
                raise ExpressionSyntaxError(
                    'Syntax Error: parameter {!r} without default follows '
                    'one with a default'.format(param.group('name')))
            params.append(Param(param.group('name')))
            continue
        default = param.group('default')
        literal = parse_number(default, options)
        if literal.length != len(default):
            raise ExpressionSyntaxError(
                'Syntax Error: default of {!r} must be a number, got {!r}'
                .format(param.group('name'), default))
        params.append(Param(param.group('name'), literal.value))
    return UserFunction(match.group('name'), params, match.group('body'))


class Environment:
    '''
    Global constants and functions.

    Entries are immutable once set, short of an explicit delete() or
    replace=True. Bare Python callables are wrapped as NativeFunctions.
    '''

    def __init__(self, symbols=None):
        self.symbols = {}
        for name, value in (symbols or {}).items():
            self.set(name, value)

    def __contains__(self, name):
        return name in self.symbols

    def __getitem__(self, name):
        return self.symbols[name]

    def __iter__(self):
        return iter(self.symbols)

    def __len__(self):
        return len(self.symbols)

    def get(self, name, default=None):
        return self.symbols.get(name, default)

    def set(self, name, value, replace=False):
        '''
        Register a constant or function.
        '''
        if name in self.symbols and not replace:
            raise AssignToConstant(
                "Cannot redefine constant '{}'".format(name))
        if not isinstance(value, (Number, NativeFunction, UserFunction)):
            if not callable(value):
                raise TypeError('Not a number or function: {!r}'
                                .format(value))
            value = NativeFunction(value, name)
        self.symbols[name] = value
        return value

    def delete(self, name):
        '''
        Remove name; return whether it was there.
        '''
        return self.symbols.pop(name, None) is not None

    def register(self, func, name=None, params=None, replace=False):
        '''
        Register Python callable func as a native function.
        '''
        native = NativeFunction(func, name, params)
        return self.set(native.name, native, replace=replace)

    def define(self, definition, options=DEFAULT_OPTIONS, replace=False):
        '''
        Register user function from `name(params) = body` text.
        '''
        function = parse_definition(definition, options)
        return self.set(function.name, function, replace=replace)
