"""Request-boundary parsing shared by the JSON and multipart endpoints.

Every helper accepts whatever the transport produced (form strings, JSON
scalars, lists) and either returns a canonical Python value or raises
ValidationError.
"""
import json
import re
from decimal import Decimal, InvalidOperation

from catalog_admin.errors import ValidationError

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off", ""}


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def clean_str(value):
    """Trimmed string, or None when blank."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def required_str(value, field):
    cleaned = clean_str(value)
    if cleaned is None:
        raise ValidationError(f"{field} is required")
    return cleaned


def parse_status(value, default=1, field="status"):
    if _blank(value):
        return default
    try:
        status = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be 0 or 1")
    if status not in (0, 1):
        raise ValidationError(f"{field} must be 0 or 1")
    return status


def parse_bool(value, default=False, field="value"):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValidationError(f"{field} must be a boolean")


def parse_id(value, field):
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field}")
    return parsed


def parse_optional_id(value, field):
    if _blank(value) or (isinstance(value, str) and value.strip().lower() == "null"):
        return None
    return parse_id(value, field)


def parse_int(value, field, minimum=None, default=None):
    if _blank(value):
        if default is not None:
            return default
        raise ValidationError(f"{field} is required")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if minimum is not None and parsed < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return parsed


def parse_decimal(value, field, minimum=Decimal("0")):
    if _blank(value) or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not parsed.is_finite():
        raise ValidationError(f"{field} must be a number")
    if minimum is not None and parsed < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return parsed


def parse_json_list(value, field):
    """List from a list or a JSON-encoded string. None when absent."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError(f"{field} must be valid JSON")
        if not isinstance(parsed, list):
            raise ValidationError(f"{field} must be a list")
        return parsed
    raise ValidationError(f"{field} must be a list")


def _raw_values(data, field):
    """Collect every value submitted under `field`, `field[]` or `field[N]`."""
    bracket = re.compile(rf"^{re.escape(field)}\[(\d*)\]$")
    keys = [k for k in data.keys() if k == field or bracket.match(k)]
    keys.sort(key=lambda k: (k != field, _bracket_index(bracket, k)))
    values = []
    for key in keys:
        if hasattr(data, "getlist"):
            values.extend(data.getlist(key))
        else:
            values.append(data[key])
    return keys, values


def _bracket_index(pattern, key):
    match = pattern.match(key)
    if match and match.group(1):
        return int(match.group(1))
    return -1


def _flatten_ids(value, field, out):
    if value is None:
        return
    if isinstance(value, (list, tuple, set)):
        for item in value:
            _flatten_ids(item, field, out)
        return
    if isinstance(value, int) and not isinstance(value, bool):
        out.append(parse_id(value, field))
        return
    text = str(value).strip()
    if not text:
        return
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            raise ValidationError(f"{field} must be valid JSON")
        _flatten_ids(decoded, field, out)
        return
    for token in text.split(","):
        token = token.strip().strip('"')
        if token:
            out.append(parse_id(token, field))


def parse_id_list(data, field, aliases=()):
    """Normalize every supported encoding of an id collection.

    Accepts bracketed form keys (``field[0]``, ``field[]``), repeated keys,
    arrays, JSON strings and comma-separated strings. Returns a
    de-duplicated list in submission order, or None if none of the field
    names were submitted at all.
    """
    if data is None:
        return None
    found = False
    collected = []
    for name in (field, *aliases):
        keys, values = _raw_values(data, name)
        if keys:
            found = True
        for value in values:
            _flatten_ids(value, field, collected)
    if not found:
        return None
    seen = set()
    unique = []
    for item in collected:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def normalize_option_ids(data):
    return parse_id_list(
        data, "variation_option_id", aliases=("variation_option_ids",)
    )


def paginate_args(args, default_limit=10, max_limit=100):
    try:
        page = max(int(args.get("page", 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(args.get("limit", default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    return page, min(max(limit, 1), max_limit)


def escape_like(text):
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
