from pytest import Item, fixture

from plotexpr import Environment, Expression, REAL, COMPLEX, library


def pytest_assertion_pass(item: Item,
                          lineno: int,
                          orig: str,
                          expl: str) -> None:
    '''
    Log every assertion, in case we later need to audit a run.

    Handy when checking which expression produced which value.

    Use with pytest -rP and enable_assertion_pass_hook.
    '''
    print('given', item.name + ':' + str(lineno), str(orig))  # no repr()!)
    print('actual', item.name + ':' + str(lineno),
          '\n'.join(str(expl).splitlines()[:-2]))


@fixture
def environment():
    '''
    Environment with the real standard library.
    '''
    return library.install(Environment())


@fixture
def complex_environment():
    return library.install(Environment(), complex=True)


@fixture
def evaluate(environment):
    '''
    Evaluate source in a fresh real Expression sharing environment.
    '''
    def evaluate(source, **kwargs):
        return Expression(source, environment, REAL, **kwargs).evaluate()
    return evaluate


@fixture
def evaluate_complex(complex_environment):
    def evaluate(source, **kwargs):
        return Expression(source, complex_environment, COMPLEX,
                          **kwargs).evaluate()
    return evaluate
