"""
Input validation and sanitization helpers.

Every function is pure. Each returns the cleaned value, or ``None`` when the
input is unusable, so callers decide which error to raise. The one exception
is ``validate_sort_order`` which always yields a usable integer.

String sanitizing strips markup delimiters and script protocols before a value
is stored. It is not a replacement for escaping at render time.
"""
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ORDER_STATUSES = ('pending', 'accepted', 'preparing', 'ready', 'completed', 'rejected')

MAX_PRICE = Decimal('10000000')
MIN_QUANTITY = 1
MAX_QUANTITY = 1000
MAX_SORT_ORDER = 9999

UUID_V4_RE = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$', re.IGNORECASE)
TABLE_NUMBER_RE = re.compile(r'^[A-Za-z0-9-]+$')
INTEGER_RE = re.compile(r'^[+-]?\d+$')
URL_RE = re.compile(r'^https?://', re.IGNORECASE)

_ANGLE_BRACKETS_RE = re.compile(r'[<>]')
_JS_PROTOCOL_RE = re.compile(r'javascript:', re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r'on\w+\s*=', re.IGNORECASE)


def sanitize_string(value, max_length=500):
    """Trim, strip dangerous fragments and cap the length of a string."""
    if value is None or value == '':
        return None

    sanitized = str(value).strip()
    sanitized = _ANGLE_BRACKETS_RE.sub('', sanitized)
    sanitized = _JS_PROTOCOL_RE.sub('', sanitized)
    sanitized = _EVENT_HANDLER_RE.sub('', sanitized)
    sanitized = sanitized.replace('\0', '')

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized or None


def _to_decimal(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, (int, Decimal)):
        number = Decimal(value)
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def validate_price(value):
    """Return the price as a Decimal with two places, or None when out of range."""
    if value is None:
        return None

    number = _to_decimal(value)
    if number is None:
        return None

    if number < 0 or number > MAX_PRICE:
        return None

    return number.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def validate_quantity(value):
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        quantity = int(value)
    elif isinstance(value, str):
        if not INTEGER_RE.match(value.strip()):
            return None
        quantity = int(value.strip())
    else:
        return None

    if quantity < MIN_QUANTITY or quantity > MAX_QUANTITY:
        return None

    return quantity


def validate_uuid(value):
    """Accept only RFC 4122 version 4 shaped identifiers."""
    if not value or not isinstance(value, str):
        return None

    value = value.strip()
    if not UUID_V4_RE.match(value):
        return None

    return value


def validate_order_status(value):
    if not value or not isinstance(value, str):
        return None

    status = value.strip().lower()
    if status in ORDER_STATUSES:
        return status

    return None


def validate_table_number(value):
    if value is None or value == '' or isinstance(value, bool):
        return None

    table = str(value).strip()
    if not table or len(table) > 20:
        return None
    if not TABLE_NUMBER_RE.match(table):
        return None

    return table


def validate_sort_order(value):
    """Coerce to an integer in [0, 9999]; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return 0
        number = int(value)
    elif isinstance(value, str) and INTEGER_RE.match(value.strip()):
        number = int(value.strip())
    else:
        return 0

    return max(0, min(number, MAX_SORT_ORDER))


def validate_uuid_array(values, max_length=50):
    if not isinstance(values, (list, tuple)):
        return None

    if len(values) == 0:
        return []
    if len(values) > max_length:
        return None

    validated = []
    for value in values:
        valid = validate_uuid(value)
        if not valid:
            return None
        validated.append(valid)

    return validated


def validate_name(value):
    if not value or not isinstance(value, str):
        return None

    return sanitize_string(value, 200)


def validate_description(value):
    if not value:
        return None

    return sanitize_string(value, 1000)


def validate_image_url(value):
    if not value:
        return None

    sanitized = sanitize_string(value, 500)
    if not sanitized or not URL_RE.match(sanitized):
        return None

    return sanitized
