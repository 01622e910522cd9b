import logging
import math

from .util import ExpressionError


logger = logging.getLogger(__name__)


def sample(expression, name, start, stop, steps):
    '''
    Evaluate expression at steps evenly spaced values of name.

    Points that fail to evaluate become NaN, a gap in the plot; the
    diagnostic goes to the debug log. Parse errors aren't per-point, and
    propagate.

    :param expression: Expression to sample.
    :param name: Variable to bind, in the expression's base frame.
    :param start: First value of name.
    :param stop: Last value of name, inclusive.
    :param steps: Number of points, at least 1.
    :returns: List of (x, value).
    '''
    if steps < 1:
        raise ValueError('Need at least one step, got {}'.format(steps))
    if expression.rpn is None:
        expression.parse()
    width = (stop - start) / (steps - 1) if steps > 1 else 0
    gap = expression.operators.coerce(math.nan)
    points = []
    for index in range(steps):
        x = start + width * index
        expression.set_symbol(name, x)
        try:
            value = expression.evaluate()
        except ExpressionError:
            logger.debug('%s at %s=%r:\n%s', expression.source, name, x,
                         expression.handle_error())
            value = gap
        points.append((x, value))
    logger.debug('sampled %r over %s in [%r, %r], %d points',
                 expression.source, name, start, stop, steps)
    return points
