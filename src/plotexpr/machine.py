from .util import (ExpressionError, ExpressionSyntaxError, StackUnderflow,
                   UnboundSymbol, AssignToConstant, ArityMismatch,
                   MissingArgument, NotCallable, ResultStackImbalance,
                   RecursionLimitExceeded, InvalidOperand, NativeError)
from .literal import NumberOptions
from .lexer import Lexer, Operator, Symbol, Call
from .operators import REAL
from .parser import compile_source, rebind
from .scope import (Environment, Frame, NativeFunction, UserFunction,
                    REQUIRED)


_MISSING = object()
_FUNCTIONS = NativeFunction, UserFunction


class Expression:
    '''
    Arithmetic stack machine for one infix expression.

    Parses once into RPN, then evaluates as often as needed, typically with
    different bindings of the plotted variable each time.

    Owns its tokens and its call stack. Shares, by reference, the
    Environment of constants and functions with the other Expressions of
    the host session.

    Errors are sticky: the first one is kept on self.error and re-raised by
    parse() and evaluate() until handle_error() formats and clears it.
    '''

    MAX_DEPTH = 64

    def __init__(self, source='', environment=None, operators=REAL,
                 options=None, max_depth=None):
        '''
        :param source: Expression text.
        :param environment: Shared Environment; a private one if None.
        :param operators: OperatorTable, REAL or COMPLEX.
        :param options: NumberOptions for literals. Defaults to the
                        table's imaginary suffix, if any.
        :param max_depth: Maximum number of frames, _MAIN included.
        '''
        self.source = source
        self.environment = Environment() if environment is None \
            else environment
        self.options = NumberOptions(imag=operators.imag) if options is None \
            else options
        self.operators = operators
        self.lexer = Lexer(operators, self.options)
        self.max_depth = max_depth or type(self).MAX_DEPTH
        self.frames = [Frame()]
        self.error = None
        self._rpn = None

    def load(self, source):
        '''
        Replace source. Locals of the base frame are kept.
        '''
        self.source = source
        self._rpn = None
        return self

    @property
    def rpn(self):
        return self._rpn

    def parse(self):
        '''
        Lex and parse source into RPN.
        '''
        self._check()
        try:
            self._rpn = compile_source(self.source, self.lexer)
        except ExpressionError as error:
            self._record(error)
            raise
        except RecursionError:
            error = RecursionLimitExceeded('Maximum nesting depth exceeded')
            self._record(error)
            raise error from None
        return self

    def use_operators(self, operators):
        '''
        Switch operator table. Parsed tokens are re-bound, not re-lexed.
        '''
        self.operators = operators
        self.lexer = Lexer(operators, self.options)
        if self._rpn is not None:
            rebind(self._rpn, operators)
        return self

    def evaluate(self):
        '''
        Run the parsed expression and return its value.

        Parses first if needed.
        '''
        self._check()
        if self._rpn is None:
            self.parse()
        try:
            return self.operators.coerce(self._run(self._rpn))
        except ExpressionError as error:
            self._record(error)
            raise
        except RecursionError:
            error = RecursionLimitExceeded('Maximum recursion depth exceeded')
            self._record(error)
            raise error from None

    def handle_error(self):
        '''
        Return formatted pending error and clear it, or None.

        Also drops every frame but the base one.
        '''
        error, self.error = self.error, None
        del self.frames[1:]
        if error is None:
            return None
        return error.describe()

    def _check(self):
        if self.error is not None:
            raise self.error

    def _record(self, error):
        if error.frames is None:
            error.frames = list(self.frames)
        self.error = error

    # Scopes

    def _find(self, name):
        for frame in reversed(self.frames):
            if name in frame.symbols:
                return frame.symbols[name]
        return self.environment.get(name, _MISSING)

    def has_symbol(self, name):
        return self._find(name) is not _MISSING

    def get_symbol(self, name):
        '''
        Return value bound to name, innermost frame first, then globals.
        '''
        value = self._find(name)
        if value is _MISSING:
            raise UnboundSymbol("Unbound symbol '{}'".format(name))
        return value

    def set_symbol(self, name, value, token=None):
        '''
        Assign to the innermost existing binding of name, else create one
        in the active frame. Globals are never assigned.
        '''
        if name in self.environment:
            raise AssignToConstant(
                "Cannot assign to constant '{}'".format(name), token=token)
        for frame in reversed(self.frames):
            if name in frame.symbols:
                frame.symbols[name] = value
                return value
        self.frames[-1].symbols[name] = value
        return value

    def def_symbol(self, name, value):
        '''
        Bind name in the active frame, shadowing anything outside it.
        '''
        self.frames[-1].symbols[name] = value
        return value

    def del_symbol(self, name):
        '''
        Remove the innermost frame binding of name; return whether found.
        '''
        for frame in reversed(self.frames):
            if name in frame.symbols:
                del frame.symbols[name]
                return True
        return False

    # Evaluation

    def _resolve(self, operand, operator=None):
        '''
        Turn a stack entry into a value, looking symbols up.
        '''
        if not isinstance(operand, Symbol):
            return operand
        value = self._find(operand.name)
        if value is _MISSING:
            if operand.name == self.options.imag:
                return 1j
            raise UnboundSymbol(
                "Unbound symbol referenced '{}'{}".format(
                    operand.name,
                    '' if operator is None
                    else ' in operator {}'.format(operator.symbol)),
                token=operand)
        if isinstance(value, _FUNCTIONS):
            raise InvalidOperand(
                "Function '{}' used as a value".format(operand.name),
                token=operand)
        return value

    def _run(self, rpn):
        stack = []
        for token in rpn:
            if isinstance(token, Operator):
                stack.append(self._operate(token, stack))
            elif isinstance(token, Call):
                stack.append(self._call(token))
            elif isinstance(token, Symbol):
                stack.append(token)
            else:
                stack.append(token.value)
        if len(stack) != 1:
            raise ResultStackImbalance(
                'Expected one item to be in result stack, got {}'
                .format(len(stack)), count=len(stack))
        return self._resolve(stack[0])

    def _operate(self, token, stack):
        if len(stack) < token.arity:
            raise StackUnderflow(
                'Stack underflow whilst executing operator {}'
                .format(token.symbol), token=token)
        operands = stack[len(stack) - token.arity:]
        del stack[len(stack) - token.arity:]
        if token.symbol == '=':
            target, value = operands
            value = self._resolve(value, token)
            if not isinstance(target, Symbol):
                raise ExpressionSyntaxError(
                    'Syntax Error: cannot assign to {!r}'.format(target),
                    token=token)
            return self.set_symbol(target.name, value, token=target)
        # Topmost first, like they come off the stack.
        values = [self._resolve(operand, token)
                  for operand in reversed(operands)][::-1]
        try:
            return token.action(*values)
        except (TypeError, ValueError, ArithmeticError) as error:
            raise InvalidOperand(
                'Operator {} cannot be applied to {}'.format(
                    token.symbol, ', '.join(map(repr, values))),
                token=token) from error

    def _call(self, call):
        callee = call.callee
        function = self._find(callee.name)
        if function is _MISSING:
            raise UnboundSymbol(
                "Unbound function referenced '{}'".format(callee.name),
                token=callee)
        if not isinstance(function, _FUNCTIONS):
            raise NotCallable("'{}' is not a function".format(callee.name),
                              token=callee)
        # In the caller's scope.
        arguments = [self._run(argument) for argument in call.arguments]
        if len(self.frames) >= self.max_depth:
            raise RecursionLimitExceeded(
                'Maximum call depth of {} exceeded calling {}'
                .format(self.max_depth, callee.name), token=call)
        self.frames.append(Frame(callee.name, call))
        try:
            values = self._bind(function, arguments, call)
            if isinstance(function, NativeFunction):
                result = self._native(function, values, call)
            else:
                result = self._run(self._compile(function))
        except ExpressionError as error:
            if error.frames is None:
                error.frames = list(self.frames)
            raise
        finally:
            self.frames.pop()
        return self.operators.coerce(result)

    def _bind(self, function, arguments, call):
        '''
        Bind arguments to parameters in the active frame; return values.
        '''
        params = function.params
        if params is None:
            return arguments
        if len(arguments) > len(params):
            raise ArityMismatch(
                "'{}' takes at most {} argument(s), got {}".format(
                    call.callee.name, len(params), len(arguments)),
                token=call)
        values = []
        for index, param in enumerate(params):
            if index < len(arguments):
                value = arguments[index]
            elif param.default is not REQUIRED:
                value = param.default
            else:
                raise MissingArgument(
                    "Missing argument '{}' in call to '{}'".format(
                        param.name, call.callee.name),
                    token=call)
            values.append(self.def_symbol(param.name, value))
        return values

    def _native(self, function, values, call):
        try:
            return function(*values)
        except ExpressionError:
            raise
        except Exception as error:
            raise NativeError('Error in function {}: {}'.format(
                call.callee.name, error), token=call) from error

    def _compile(self, function):
        try:
            return function.compile(self.lexer)
        except ExpressionError as error:
            raise type(error)('{} in function {}'.format(
                error.message, function.name), token=error.token) from error
