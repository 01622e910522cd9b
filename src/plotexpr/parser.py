'''
Infix token list to RPN.

Calls are collapsed first, so the shunting-yard proper only ever sees
numbers, symbols, calls and operators.
'''

from .util import ExpressionSyntaxError
from .lexer import Operator, Symbol, Call


def _is(token, symbol):
    return isinstance(token, Operator) and token.symbol == symbol


def _closing(tokens, opening):
    '''
    Return index of the ) matching the ( at index opening.
    '''
    depth = 0
    for index in range(opening, len(tokens)):
        if _is(tokens[index], '('):
            depth += 1
        elif _is(tokens[index], ')'):
            depth -= 1
            if depth == 0:
                return index
    raise ExpressionSyntaxError(
        "Syntax Error: expected {} more ')'".format(depth),
        token=tokens[opening])


def _split(tokens):
    '''
    Split argument tokens on top-level commas.
    '''
    if not tokens:
        return []
    arguments, current, depth = [], [], 0
    for token in tokens:
        if _is(token, '('):
            depth += 1
        elif _is(token, ')'):
            depth -= 1
        elif depth == 0 and _is(token, ','):
            arguments.append(current)
            current = []
            continue
        current.append(token)
    arguments.append(current)
    return arguments


def extract_calls(tokens):
    '''
    Return tokens with every `symbol ( args... )` collapsed into a Call.

    Each argument becomes its own RPN program.
    '''
    tokens = list(tokens)
    index = 0
    while index < len(tokens):
        callee = tokens[index]
        if isinstance(callee, Symbol) and index + 1 < len(tokens) \
                and _is(tokens[index + 1], '('):
            closing = _closing(tokens, index + 1)
            arguments = [to_rpn(extract_calls(argument))
                         for argument
                         in _split(tokens[index + 2:closing])]
            tokens[index:closing + 1] = [Call(callee.source, callee.start,
                                              tokens[closing].end,
                                              callee, arguments)]
        index += 1
    return tokens


def to_rpn(tokens):
    '''
    Shunting-yard: infix tokens (calls already extracted) to postfix.
    '''
    output, stack = [], []
    for token in tokens:
        if not isinstance(token, Operator):
            output.append(token)
        elif token.symbol == '(':
            stack.append(token)
        elif token.symbol == ')':
            while stack and not _is(stack[-1], '('):
                output.append(stack.pop())
            if not stack:
                raise ExpressionSyntaxError("Syntax Error: unmatched ')'",
                                            token=token)
            stack.pop()
        else:
            while stack and (stack[-1].precedence > token.precedence
                             if token.right else
                             stack[-1].precedence >= token.precedence):
                output.append(stack.pop())
            stack.append(token)
    while stack:
        token = stack.pop()
        if _is(token, '('):
            raise ExpressionSyntaxError("Syntax Error: unmatched '('",
                                        token=token)
        output.append(token)
    return output


def compile_source(source, lexer):
    '''
    Lex and parse source into RPN.
    '''
    return to_rpn(extract_calls(lexer.tokenize(source)))


def rebind(rpn, operators):
    '''
    Bind every operator in rpn, call arguments included, to another table.
    '''
    for token in rpn:
        if isinstance(token, Operator):
            token.bind(operators)
        elif isinstance(token, Call):
            for argument in token.arguments:
                rebind(argument, operators)


def dump(rpn):
    '''
    Return RPN as text, calls as name(arg; arg).
    '''
    words = []
    for token in rpn:
        if isinstance(token, Call):
            words.append('{}({})'.format(
                token.callee.name,
                '; '.join(dump(argument) for argument in token.arguments)))
        elif isinstance(token, Operator):
            words.append(token.symbol)
        else:
            words.append(token.text)
    return ' '.join(words)
