import regex

from .util import LexError
from .literal import DEFAULT_OPTIONS, parse_number
from .operators import GRAMMAR, SYMBOLS, REAL


class Token:
    '''
    A lexeme and where it came from, for diagnostics.
    '''
    __slots__ = 'source', 'start', 'end'

    def __init__(self, source, start, end):
        self.source = source
        self.start = start
        self.end = end

    @property
    def text(self):
        return self.source[self.start:self.end]

    def __repr__(self):
        return '<{} {!r}@{}>'.format(type(self).__name__, self.text,
                                     self.start)


class Number(Token):
    __slots__ = 'value',

    def __init__(self, source, start, end, value):
        super().__init__(source, start, end)
        self.value = value


class Symbol(Token):
    __slots__ = 'name',

    def __init__(self, source, start, end, name):
        super().__init__(source, start, end)
        self.name = name


class Operator(Token):
    '''
    Operator with its grammar and its action bound.
    '''
    __slots__ = 'spec', 'action'

    def __init__(self, source, start, end, spec, action=None):
        super().__init__(source, start, end)
        self.spec = spec
        self.action = action

    symbol = property(lambda self: self.spec.symbol)
    arity = property(lambda self: self.spec.arity)
    precedence = property(lambda self: self.spec.precedence)
    right = property(lambda self: self.spec.right)

    def bind(self, operators, spec=None):
        '''
        (Re-)bind action from operator table, optionally changing grammar.
        '''
        if spec is not None:
            self.spec = spec
        self.action = operators.get(self.spec.symbol)


class Call(Token):
    '''
    Collapsed call site: callee symbol and one RPN program per argument.
    '''
    __slots__ = 'callee', 'arguments'

    def __init__(self, source, start, end, callee, arguments):
        super().__init__(source, start, end)
        self.callee = callee
        self.arguments = arguments


class Lexer:
    '''
    Lexer for the infix expression grammar.

    Holds the operator table actions get bound from, and the numeric
    literal options. Otherwise stateless.
    '''
    IDENTIFIER = r'[A-Za-z_$][A-Za-z0-9_$]*'
    SPACE = r'\s+'
    OPERATOR = r'|'.join(map(regex.escape, SYMBOLS))
    FLAGS = regex.VERSION1

    def __init__(self, operators=REAL, options=DEFAULT_OPTIONS):
        self.operators = operators
        self.options = options
        cls = type(self)
        self._space = regex.compile(cls.SPACE, flags=cls.FLAGS)
        self._operator = regex.compile(cls.OPERATOR, flags=cls.FLAGS)
        self._identifier = regex.compile(cls.IDENTIFIER, flags=cls.FLAGS)

    def lex(self, source):
        '''
        Yield tokens of source, raising LexError on the first bad character.

        Unary operators aren't told apart here, see tokenize().
        '''
        pos = 0
        while pos < len(source):
            match = self._space.match(source, pos)
            if match:
                pos = match.end()
                continue
            match = self._operator.match(source, pos)
            if match:
                yield Operator(source, pos, match.end(),
                               GRAMMAR[match.group()],
                               self.operators.get(match.group()))
                pos = match.end()
                continue
            literal = parse_number(source[pos:], self.options)
            if literal.length:
                yield Number(source, pos, pos + literal.length, literal.value)
                pos += literal.length
                continue
            match = self._identifier.match(source, pos)
            if match:
                yield Symbol(source, pos, match.end(), match.group())
                pos = match.end()
                continue
            raise LexError("Syntax Error: unknown token '{}' at position {}"
                           .format(source[pos], pos),
                           token=Token(source, pos, pos + 1),
                           position=pos)

    def tokenize(self, source):
        '''
        Return token list of source, with unary + and - rewritten.
        '''
        tokens = list(self.lex(source))
        previous = None
        for token in tokens:
            if isinstance(token, Operator) and token.symbol in ('+', '-') \
                    and (previous is None or
                         isinstance(previous, Operator) and
                         previous.symbol != ')'):
                token.bind(self.operators, GRAMMAR['u' + token.symbol])
            previous = token
        return tokens
