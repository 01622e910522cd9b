'''
Numeric literal scanner.

Grammar, all optional parts in order:

    sign | radix prefix (0x, 0d, 0b, 0o)
    digits [ . digits ]        separator allowed strictly between digits
    e exponent                 itself a literal, without exponent
    imaginary suffix           only when no exponent was consumed

Scanning never fails: a text that doesn't start with a number yields a
zero-length literal and the caller tries other lexemes.
'''

from collections import namedtuple
import math


RADICES = {'x': 16, 'd': 10, 'b': 2, 'o': 8}
DIGITS = {
    16: '0123456789abcdefABCDEF',
    10: '0123456789',
    8: '01234567',
    2: '01',
}

# Past this, 10 ** exponent as an exact integer is pointless and slow.
_EXACT_EXPONENT = 1000


NumberOptions = namedtuple('NumberOptions',
                           'exponent decimal signed separator imag',
                           defaults=(True, True, True, None, None))
NumberOptions.__doc__ = '''
What the literal grammar accepts.

:param exponent: Allow an e/E exponent tail.
:param decimal: Allow a decimal point.
:param signed: Allow a leading + or -.
:param separator: Digit separator character (e.g. '_'), or None.
:param imag: Imaginary suffix character (e.g. 'i'), or None.
'''

DEFAULT_OPTIONS = NumberOptions()


NumberLiteral = namedtuple('NumberLiteral',
                           'length text sign radix integral fractional '
                           'exponent imag value')


def _nothing():
    return NumberLiteral(0, '', 1, 10, '', '', None, False, None)


def positional(integral, fractional, radix):
    '''
    Return (numerator, denominator) of a digit string in radix.

    Weights are summed as exact integers, so integral values never pick up
    floating point round-off.
    '''
    numerator = 0
    for place, digit in enumerate(reversed(integral + fractional)):
        numerator += int(digit, 16) * radix ** place
    return numerator, radix ** len(fractional)


def _value(numerator, denominator, exponent):
    try:
        if exponent is None or exponent == 0:
            return numerator / denominator
        if math.isfinite(exponent) and exponent == int(exponent) \
                and abs(exponent) <= _EXACT_EXPONENT:
            exponent = int(exponent)
            if exponent > 0:
                numerator *= 10 ** exponent
            else:
                denominator *= 10 ** -exponent
            return numerator / denominator
        return numerator / denominator * 10.0 ** exponent
    except OverflowError:
        return math.inf if numerator else 0.0


def parse_number(text, options=DEFAULT_OPTIONS):
    '''
    Scan the longest numeric literal at the start of text.

    :param text: Text starting at the candidate position.
    :param options: NumberOptions.
    :returns: NumberLiteral; length 0 if there's no number here.
    '''
    pos, end = 0, len(text)
    sign, radix = 1, 10
    integral = fractional = ''
    dot = False
    exponent = None
    imag = False

    if options.signed and end and text[0] in '+-':
        sign = -1 if text[0] == '-' else 1
        pos = 1
    elif end > 2 and text[0] == '0' and text[1] in RADICES \
            and text[2] in DIGITS[RADICES[text[1]]]:
        radix = RADICES[text[1]]
        pos = 2
    digits = DIGITS[radix]

    while pos < end:
        char = text[pos]
        if char in digits:
            if dot:
                fractional += char
            else:
                integral += char
        elif char == '.' and options.decimal and not dot:
            dot = True
        elif options.separator and char == options.separator:
            # Strictly between two digits, or the literal stops here.
            if not (pos and text[pos - 1] in digits and
                    pos + 1 < end and text[pos + 1] in digits):
                break
        elif char in 'eE' and options.exponent and (integral or fractional):
            tail = parse_number(text[pos + 1:],
                                options._replace(exponent=False, imag=None))
            if tail.length:
                exponent = tail
                pos += 1 + tail.length
            break
        else:
            break
        pos += 1

    if not (integral or fractional):
        return _nothing()
    if exponent is None and options.imag and pos < end \
            and text[pos] == options.imag:
        imag = True
        pos += 1

    numerator, denominator = positional(integral, fractional, radix)
    value = sign * _value(numerator, denominator,
                          None if exponent is None else exponent.value)
    if imag:
        value = complex(0, value)
    return NumberLiteral(pos, text[:pos], sign, radix, integral, fractional,
                         None if exponent is None else exponent.value,
                         imag, value)
