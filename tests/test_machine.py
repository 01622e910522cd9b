'''
Expression evaluation tests
'''

import cmath
import math

import regex

from plotexpr import (Expression, Environment, NumberOptions, REAL, COMPLEX,
                      LexError, ExpressionSyntaxError, StackUnderflow,
                      UnboundSymbol, AssignToConstant, ArityMismatch,
                      MissingArgument, NotCallable, ResultStackImbalance,
                      RecursionLimitExceeded, InvalidOperand, NativeError)

from pytest import raises, approx, mark


@mark.parametrize('source, expected', [
    ('2 + 3 * 4', 14),
    ('(2 + 3) * 4', 20),
    ('2 ** 3 ** 2', 512),
    ('10 - 4 - 3', 3),
    ('7 % 3', 1),
    ('-7 % 3', -1),
    ('0x10 + 0b11', 19),
    ('1 < 2', 1),
    ('2 == 3', 0),
    ('2 != 3', 1),
    ('3 >= 3', 1),
    ('!0', 1),
    ('!5', 0),
    ('!(0 / 0)', 1),
    ('1, 2', 2),
])
def test_arithmetic(evaluate, source, expected):
    assert evaluate(source) == expected


def test_unary_minus_binds_tighter_than_exponent(evaluate):
    assert evaluate('-2 ** 2') == 4
    assert evaluate('2 ** -1') == 0.5


def test_results_are_floats(evaluate):
    assert type(evaluate('1')) is float


def test_ieee_division(evaluate):
    assert evaluate('1 / 0') == math.inf
    assert evaluate('-1 / 0') == -math.inf
    assert math.isnan(evaluate('0 / 0'))
    assert evaluate('0 ** -1') == math.inf
    assert math.isnan(evaluate('(0 - 1) ** 0.5'))


def test_variable(environment):
    expression = Expression('x ** 2 + 1', environment).parse()
    expression.set_symbol('x', 3)
    assert expression.evaluate() == 10
    expression.set_symbol('x', 4)
    assert expression.evaluate() == 17


def test_evaluate_parses_when_needed(environment):
    assert Expression('1 + 1', environment).evaluate() == 2


def test_evaluating_twice_gives_the_same_result(environment):
    expression = Expression('sin(x) * 2', environment).parse()
    expression.set_symbol('x', 0.5)
    assert expression.evaluate() == expression.evaluate()


def test_assignment(environment):
    expression = Expression('a = b = 3, a + b', environment)
    assert expression.evaluate() == 6
    assert expression.get_symbol('a') == 3
    assert expression.get_symbol('b') == 3


def test_assignment_persists_across_loads(environment):
    expression = Expression('x = 2', environment)
    expression.evaluate()
    assert expression.load('x * 10').evaluate() == 20


def test_assign_to_constant(environment):
    expression = Expression('pi = 4', environment)
    with raises(AssignToConstant) as e:
        expression.evaluate()
    assert e.value.token.text == 'pi'
    assert environment['pi'] == math.pi


def test_set_symbol_refuses_constants(environment):
    with raises(AssignToConstant):
        Expression('', environment).set_symbol('pi', 4)


def test_assign_to_non_symbol(evaluate):
    with raises(ExpressionSyntaxError, match='cannot assign'):
        evaluate('3 = 4')


def test_unbound_symbol_span(environment):
    source = '2 + unknownSym'
    expression = Expression(source, environment)
    with raises(UnboundSymbol) as e:
        expression.evaluate()
    token = e.value.token
    assert source[token.start:token.end] == 'unknownSym'


def test_imaginary_unit_needs_complex(evaluate):
    with raises(UnboundSymbol):
        evaluate('i')


def test_symbol_operations(environment):
    expression = Expression('', environment)
    assert not expression.has_symbol('y')
    expression.set_symbol('y', 1)
    assert expression.has_symbol('y')
    assert expression.has_symbol('pi')
    assert expression.del_symbol('y')
    assert not expression.del_symbol('y')
    assert not expression.del_symbol('pi')
    with raises(UnboundSymbol):
        expression.get_symbol('y')


def test_def_symbol_shadows_globals(environment):
    expression = Expression('pi * 2', environment)
    assert expression.def_symbol('pi', 3) == 3
    assert expression.evaluate() == 6
    assert environment.get('pi') == approx(math.pi)
    assert expression.del_symbol('pi')
    assert expression.evaluate() == approx(2 * math.pi)


def test_native_function(environment):
    environment.set('f', lambda a, b: a + b)
    expression = Expression('f(2, 3)', environment)
    assert expression.evaluate() == 5


def test_native_function_arity(environment):
    environment.set('f', lambda a, b: a + b)
    with raises(ArityMismatch):
        Expression('f(1, 2, 3)', environment).evaluate()
    with raises(MissingArgument, match=regex.escape("'b'")):
        Expression('f(1)', environment).evaluate()


def test_native_function_defaults(environment):
    environment.set('scale', lambda x, by=10: x * by)
    assert Expression('scale(2)', environment).evaluate() == 20


def test_native_function_failure(environment):
    def boom(x):
        raise RuntimeError('no good')
    environment.register(boom)
    with raises(NativeError, match='no good') as e:
        Expression('boom(1)', environment).evaluate()
    assert isinstance(e.value.__cause__, RuntimeError)
    assert e.value.token.text == 'boom(1)'


def test_user_function_defaults(environment):
    environment.define('g(x, y=2) = x + y')
    assert Expression('g(5)', environment).evaluate() == 7
    assert Expression('g(5, 10)', environment).evaluate() == 15


def test_user_function_missing_argument(environment):
    environment.define('g(x, y=2) = x + y')
    with raises(MissingArgument):
        Expression('g()', environment).evaluate()


def test_user_function_too_many_arguments(environment):
    environment.define('g(x, y=2) = x + y')
    with raises(ArityMismatch):
        Expression('g(1, 2, 3)', environment).evaluate()


def test_arguments_are_evaluated_in_callers_scope(environment):
    environment.define('p(x, y=2) = x + y')
    assert Expression('x = 100, p(x / 100)', environment).evaluate() == 3


def test_parameters_shadow_outer_bindings(environment):
    environment.define('double(a) = a * 2')
    expression = Expression('a = 10, double(3) + a', environment)
    assert expression.evaluate() == 16


def test_function_body_sees_callers_locals(environment):
    environment.define('k() = a')
    assert Expression('a = 5, k()', environment).evaluate() == 5


def test_assignment_in_function_updates_outer_binding(environment):
    environment.define('bump(d) = a = a + d')
    expression = Expression('a = 1, bump(2), a', environment)
    assert expression.evaluate() == 3


def test_assignment_in_function_creates_local(environment):
    environment.define('local() = fresh = 1')
    expression = Expression('local()', environment)
    assert expression.evaluate() == 1
    assert not expression.has_symbol('fresh')


def test_frames_are_popped(environment):
    environment.define('g(x) = x')
    expression = Expression('g(1) + g(2)', environment)
    expression.evaluate()
    assert len(expression.frames) == 1


def test_not_callable(environment):
    with raises(NotCallable) as e:
        Expression('pi(2)', environment).evaluate()
    assert e.value.token.text == 'pi'


def test_unbound_function(environment):
    with raises(UnboundSymbol) as e:
        Expression('nope(2)', environment).evaluate()
    assert e.value.token.text == 'nope'


def test_function_as_value(evaluate):
    with raises(InvalidOperand):
        evaluate('sin + 1')
    with raises(InvalidOperand):
        evaluate('sin')


def test_stack_underflow(evaluate):
    with raises(StackUnderflow, match=regex.escape('operator +')):
        evaluate('2 +')


def test_result_stack_imbalance(evaluate):
    with raises(ResultStackImbalance) as e:
        evaluate('1 2')
    assert e.value.count == 2
    with raises(ResultStackImbalance) as e:
        evaluate('()')
    assert e.value.count == 0


def test_lex_error_is_recorded(environment):
    expression = Expression('2 # 3', environment)
    with raises(LexError):
        expression.parse()
    assert isinstance(expression.error, LexError)
    assert expression.handle_error().splitlines() == [
        "Syntax Error: unknown token '#' at position 2",
        '#',
        '^',
        'in _MAIN',
    ]


def test_errors_are_sticky(environment):
    expression = Expression('2 + nope', environment)
    with raises(UnboundSymbol) as first:
        expression.evaluate()
    with raises(UnboundSymbol) as second:
        expression.load('1').evaluate()
    assert second.value is first.value
    assert expression.handle_error() is not None
    assert expression.error is None
    assert expression.evaluate() == 1


def test_handle_error_without_error(environment):
    assert Expression('1', environment).handle_error() is None


def test_diagnostic(environment):
    expression = Expression('2 + unknownSym', environment)
    with raises(UnboundSymbol):
        expression.evaluate()
    assert expression.handle_error().splitlines() == [
        "Unbound symbol referenced 'unknownSym' in operator +",
        'unknownSym',
        '^' + '~' * 9,
        'in _MAIN',
    ]


def test_diagnostic_with_call_stack(environment):
    environment.define('h(x) = x + y')
    expression = Expression('1 + h(2)', environment)
    with raises(UnboundSymbol) as e:
        expression.evaluate()
    assert [frame.name for frame in e.value.frames] == ['_MAIN', 'h']
    assert expression.handle_error().splitlines() == [
        "Unbound symbol referenced 'y' in operator +",
        'y',
        '^',
        'in _MAIN',
        'in h, called at',
        '    h(2)',
        '    ^~~~',
    ]
    assert len(expression.frames) == 1


def test_nested_error_is_not_rewritten(environment):
    environment.define('inner() = 1 / nope')
    environment.define('outer() = inner() + 1')
    with raises(UnboundSymbol) as e:
        Expression('outer()', environment).evaluate()
    assert e.value.token.text == 'nope'
    assert [frame.name for frame in e.value.frames] == \
        ['_MAIN', 'outer', 'inner']


def test_parse_error_in_function_body(environment):
    environment.define('bad(x) = (x')
    with raises(ExpressionSyntaxError, match='in function bad') as e:
        Expression('bad(1)', environment).evaluate()
    assert e.value.token.source == '(x'


def test_recursion_limit(environment):
    environment.define('f(x) = f(x)')
    expression = Expression('f(1)', environment, max_depth=5)
    with raises(RecursionLimitExceeded) as e:
        expression.evaluate()
    assert len(e.value.frames) == 5
    expression.handle_error()
    assert len(expression.frames) == 1


def test_deep_nesting_is_recorded(environment):
    source = 'sin(' * 2000 + '1' + ')' * 2000
    expression = Expression(source, environment)
    with raises(RecursionLimitExceeded):
        expression.evaluate()
    assert isinstance(expression.error, RecursionLimitExceeded)
    with raises(RecursionLimitExceeded):
        expression.parse()
    assert expression.handle_error().startswith(
        'Maximum nesting depth exceeded')
    assert expression.error is None


def test_default_recursion_limit(environment):
    environment.define('f(x) = f(x + 1)')
    with raises(RecursionLimitExceeded):
        Expression('f(1)', environment).evaluate()


def test_shared_environment(environment):
    first = Expression('twice(3)', environment)
    second = Expression('twice(4)', environment)
    environment.define('twice(x) = 2 * x')
    assert first.evaluate() == 6
    assert second.evaluate() == 8


def test_locals_are_not_shared(environment):
    first = Expression('x = 1', environment)
    first.evaluate()
    assert not Expression('', environment).has_symbol('x')


def test_digit_separator_option(environment):
    expression = Expression('1_000 + 1', environment,
                            options=NumberOptions(separator='_'))
    assert expression.evaluate() == 1001


def test_complex_product(evaluate_complex):
    value = evaluate_complex('(1+2i) * (1-2i)')
    assert value.real == approx(5, abs=1e-9)
    assert value.imag == approx(0, abs=1e-9)


def test_imaginary_unit(evaluate_complex):
    assert evaluate_complex('i * i') == -1
    assert evaluate_complex('sqrt(-4)') == approx(2j)


def test_imaginary_unit_can_be_shadowed(evaluate_complex):
    assert evaluate_complex('i = 3, i') == 3


def test_complex_results_are_complex(evaluate_complex):
    assert type(evaluate_complex('1')) is complex
    assert type(evaluate_complex('abs(3 + 4i)')) is complex


@mark.parametrize('source, expected', [
    ('-7 % 3', 2),
    ('7.5 % 2', 1.5),
    ('(1 + 5i) < 2', 1),
    ('(3 - 9i) > (2 + 9i)', 1),
    ('(2 + 9i) <= 1', 0),
    ('1 + i == 1 + i', 1),
    ('1 + i == 1', 0),
    ('1 + i != 1', 1),
    ('!0', 1),
    ('!i', 0),
    ('!(0 / 0)', 1),
])
def test_complex_operators(evaluate_complex, source, expected):
    assert evaluate_complex(source) == expected


def test_complex_division_by_zero(evaluate_complex):
    assert evaluate_complex('(1 + i) / 0') == complex(math.inf, 0)
    assert cmath.isnan(evaluate_complex('0 / 0'))


def test_exponent_then_imaginary_suffix(evaluate_complex):
    with raises(ResultStackImbalance) as e:
        evaluate_complex('2e3i')
    assert e.value.count == 2


def test_switching_tables_does_not_relex():
    expression = Expression('(0 - 1) ** 0.5', Environment()).parse()
    rpn = expression.rpn
    assert math.isnan(expression.evaluate())
    expression.use_operators(COMPLEX)
    assert expression.rpn is rpn
    assert cmath.isclose(expression.evaluate(), 1j, abs_tol=1e-9)
    expression.use_operators(REAL)
    assert math.isnan(expression.evaluate())


def test_user_function_serves_both_tables(environment):
    environment.define('sq(z) = z * z')
    real = Expression('sq(3)', environment)
    complex_ = Expression('sq(3)', environment, COMPLEX)
    assert real.evaluate() == 9
    assert complex_.evaluate() == 9 + 0j
    assert type(complex_.evaluate()) is complex
