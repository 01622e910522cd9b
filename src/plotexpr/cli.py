from os import isatty, path
import sys
from argparse import ArgumentParser, REMAINDER, OPTIONAL
import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from .util import RPNError, ExpressionError
from .literal import NumberOptions
from .lexer import Lexer
from .operators import GRAMMAR, TABLES
from .parser import dump
from .scope import Environment
from .machine import Expression
from .sampler import sample
from . import library


logger = logging.getLogger(__name__)


class InteractiveInput:
    def __init__(self, prompt, history=None):
        self.prompt = prompt
        self.history = history

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    vi_mode=True,
                                    enable_suspend=True,
                                    enable_open_in_editor=True,
                                    history=self.history,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


def format_value(value):
    '''
    Format a real or complex result for printing.
    '''
    if isinstance(value, complex):
        return '{:.15g}{:+.15g}i'.format(value.real, value.imag)
    return '{:.15g}'.format(value)


class CLI:
    '''
    Command line interface to the expression engine.

    Each input line is one of:

    - an expression, evaluated and printed;
    - `def name(params) = body`, defining a function;
    - `del name`, removing a local or a global.

    Assignments (`x = 3`) persist across lines.
    '''

    DEFAULT_PROMPT = '> '
    HISTORY_FILE = '~/.plotexpr_history'

    def _environment(self):
        return library.install(Environment(), complex=self.args.complex)

    def _expression(self, environment):
        operators = TABLES['complex' if self.args.complex else 'real']
        options = NumberOptions(separator=self.args.separator,
                                imag=operators.imag)
        return Expression(environment=environment,
                          operators=operators,
                          options=options,
                          max_depth=self.args.max_depth)

    def execute(self, expression, line):
        '''
        Run one input line against expression and its environment.
        '''
        line = line.strip()
        if not line or line.startswith('#'):
            return
        if line.startswith('def '):
            function = expression.environment.define(
                line[len('def '):], expression.options, replace=True)
            logger.debug('defined %r', function)
            return
        if line.startswith('del '):
            name = line[len('del '):].strip()
            if not (expression.del_symbol(name) or
                    expression.environment.delete(name)):
                raise RPNError('No such name {!r}'.format(name))
            return
        expression.load(line)
        try:
            print(format_value(expression.evaluate()))
        except ExpressionError:
            print(expression.handle_error(), file=sys.stderr)

    def executor(self):
        '''
        Evaluate expressions (calculator).
        '''
        expression = self._expression(self._environment())
        for line in self.args.expressions:
            try:
                self.execute(expression, line)
            except ExpressionError as e:
                # Raised outside an evaluation, e.g. by def: not sticky.
                print(e.describe(), file=sys.stderr)
            except RPNError as e:
                print(e.args[0], file=sys.stderr)

    def dumper(self):
        '''
        Dump tokens and RPN of every expression.
        '''
        expression = self._expression(self._environment())
        print('[tokens]\t[rpn]')
        for line in self.args.expressions:
            line = line.strip()
            if not line:
                continue
            try:
                expression.load(line).parse()
            except ExpressionError:
                print(expression.handle_error(), file=sys.stderr)
                continue
            tokens = expression.lexer.tokenize(line)
            print(' '.join(token.text for token in tokens),
                  dump(expression.rpn),
                  sep='\t')

    def sampler(self):
        '''
        Tabulate every expression over the --sample range.
        '''
        name, start, stop, steps = self.args.sample
        expression = self._expression(self._environment())
        for line in self.args.expressions:
            line = line.strip()
            if not line:
                continue
            expression.load(line)
            try:
                points = sample(expression, name, float(start), float(stop),
                                int(steps))
            except ExpressionError:
                print(expression.handle_error(), file=sys.stderr)
                continue
            for x, value in points:
                print(format_value(x), format_value(value), sep='\t')

    def raw_grammar(self):
        '''
        Print identifier pattern and operator table.
        '''
        print('identifier', Lexer.IDENTIFIER, sep='\t')
        print('[symbol]\t<arity>\t<precedence>\t<associativity>')
        for spec in sorted(GRAMMAR.values(),
                           key=lambda spec: (spec.precedence, spec.symbol)):
            print(spec.symbol, spec.arity, spec.precedence,
                  'rtl' if spec.right else 'ltr', sep='\t')

    def _prompting_input(self):
        '''
        Return prompting stdin.__iter__ decorator...

        If either:
        - prompt explicitly specified.
        - both stdin/out are a tty
        '''
        if self.args.prompt or \
           isatty(sys.stdin.fileno()) and isatty(sys.stdout.fileno()):
            return InteractiveInput(
                prompt=self.args.prompt or self.DEFAULT_PROMPT,
                history=FileHistory(path.expanduser(self.HISTORY_FILE)))
        else:
            return sys.stdin

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(
            description='Expression calculator of the function plotter')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true')
        self.argument_parser.add_argument('-c', '--complex',
                                          action='store_true',
                                          help='complex numbers, 2i literals')
        self.argument_parser.add_argument('--separator',
                                          metavar='CHAR',
                                          help='digit separator, e.g. _')
        self.argument_parser.add_argument('--max-depth',
                                          type=int,
                                          default=Expression.MAX_DEPTH,
                                          help='maximum call depth')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-e', '--expression',
                                       nargs=REMAINDER,
                                       dest='expressions')
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        main_groups.add_argument('-s', '--sample',
                                 nargs=4,
                                 metavar=('NAME', 'START', 'STOP', 'STEPS'))
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=sys.stdin)

    def _interactive(self):
        return isinstance(self.args.expressions, InteractiveInput)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.
        '''
        self.args = self.argument_parser.parse_args(args)
        logging.basicConfig(
            level=logging.DEBUG if self.args.verbose else logging.WARNING,
            format='%(levelname)s %(name)s: %(message)s')
        if self.args.sample:
            self.args.action = self.sampler
        if self.args.expressions is sys.stdin:
            self.args.expressions = self._prompting_input()
        logger.debug('running %s, interactive: %s',
                     self.args.action.__name__, self._interactive())
        try:
            self.args.action()
        except KeyboardInterrupt:
            sys.exit(1)
