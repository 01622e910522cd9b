from functools import wraps
import math


class RPNError(Exception):
    pass


class ExpressionError(RPNError):
    '''
    Failure while lexing, parsing or evaluating an expression.

    :param message: Human readable description.
    :param token: Offending token, if any. Its span is underlined in
                  diagnostics.
    :param frames: Call stack snapshot, innermost last. Taken once, where
                   the error happened, before any frame is unwound.
    '''

    def __init__(self, message, token=None, frames=None):
        super().__init__(message)
        self.message = message
        self.token = token
        self.frames = frames

    def describe(self):
        '''
        Return multi-line diagnostic: message, underlined snippet, frames.
        '''
        lines = [self.message]
        if self.token is not None:
            lines.extend(underline(self.token))
        for frame in self.frames or ():
            if frame.call is None:
                lines.append('in {}'.format(frame.name))
            else:
                lines.append('in {}, called at'.format(frame.name))
                lines.extend('    ' + line for line in underline(frame.call))
        return '\n'.join(lines)


class LexError(ExpressionError):
    def __init__(self, message, token=None, frames=None, position=None):
        super().__init__(message, token, frames)
        self.position = position


class ExpressionSyntaxError(ExpressionError):
    pass


class StackUnderflow(ExpressionError):
    pass


class UnboundSymbol(ExpressionError):
    pass


class AssignToConstant(ExpressionError):
    pass


class ArityMismatch(ExpressionError):
    pass


class MissingArgument(ExpressionError):
    pass


class NotCallable(ExpressionError):
    pass


class ResultStackImbalance(ExpressionError):
    def __init__(self, message, token=None, frames=None, count=0):
        super().__init__(message, token, frames)
        # Zero: nothing left to return. More than one: dangling operands.
        self.count = count


class RecursionLimitExceeded(ExpressionError):
    pass


class InvalidOperand(ExpressionError):
    pass


class NativeError(ExpressionError):
    pass


def underline(token):
    '''
    Return the exact source text of token and a ^~~~ underline as wide.
    '''
    text = token.text
    return text, '^' + '~' * (len(text) - 1)


def ieee(nan=math.nan, inf=math.inf):
    '''
    Decorator that turns Python's arithmetic exceptions into IEEE values.

    Plots want a gap (NaN) or a pole (inf), not an abort, when sqrt(-1) or
    exp(1000) comes up. Anything else passes through.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args):
            try:
                return f(*args)
            except OverflowError:
                return inf
            except (ValueError, ZeroDivisionError):
                return nan
        return wrapper
    return decorator
