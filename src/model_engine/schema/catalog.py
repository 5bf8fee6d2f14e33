"""
Ready-made field descriptors for common value shapes.

Each factory takes the field name plus the options that make sense for it and
returns a FieldDescriptor; table definitions combine them, e.g.

    fields = [
        catalog.integer_key(),
        catalog.label("name", unique=True),
        catalog.email("email"),
    ]
"""
import ipaddress
import re
from typing import Any

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from .fields import FieldDescriptor, FieldKind

INTEGER_KEY_MAX = (1 << 30) * 2 - 1

TOKEN_PATTERN = r"^[a-z0-9_\-]+$"
HASH_PATTERN = r"^[0-9a-fA-F]{64}$"
BIG_INTEGER_KEY_PATTERN = r"^[1-9][0-9]*$"
NON_NEGATIVE_BIG_INTEGER_PATTERN = r"^(0|[1-9][0-9]*)$"


def integer_key(name: str = "key") -> FieldDescriptor:
    """Positive integer primary key that fits a signed 32-bit column."""
    return FieldDescriptor(name, FieldKind.INTEGER, minimum=1, maximum=INTEGER_KEY_MAX)


def big_integer_key(name: str = "key") -> FieldDescriptor:
    """Positive big integer primary key, carried as decimal text to avoid precision loss."""
    return FieldDescriptor(name, FieldKind.STRING, pattern=BIG_INTEGER_KEY_PATTERN)


def non_negative_big_integer(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, pattern=NON_NEGATIVE_BIG_INTEGER_PATTERN, **options)


def string(name: str, **options: Any) -> FieldDescriptor:
    """Any string, the empty string included."""
    return FieldDescriptor(name, FieldKind.STRING, **options)


def label(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=256, **options)


def description(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=4096, **options)


def _check_email(value: str) -> str:
    # email-validator syntax check, no DNS lookup
    validate_email(value)
    return value


def email(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=256, check=_check_email, **options)


def token(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=256, pattern=TOKEN_PATTERN, **options)


def hash_string(name: str, **options: Any) -> FieldDescriptor:
    """Hex digest of a 256-bit hash."""
    return FieldDescriptor(name, FieldKind.STRING, min_length=64, max_length=64, pattern=HASH_PATTERN, **options)


_HTTP_URL = TypeAdapter(HttpUrl)


def _check_http_uri(value: str) -> str:
    """Accept absolute http(s) URLs; the stored value stays the submitted string."""
    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        raise PydanticCustomError(error["type"], error["msg"]) from exc
    return value


def http_uri(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=4096, check=_check_http_uri, **options)


def _check_ip_address(value: str) -> str:
    # raises ValueError for anything that is neither IPv4 nor IPv6
    ipaddress.ip_address(value)
    return value


def ip_address(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.STRING, max_length=45, check=_check_ip_address, **options)


def utc_datetime_pattern(date_delimiter: str = "/", time_delimiter: str = ":", portion_delimiter: str = "_") -> str:
    """Pattern of `YYYY/MM/DD_hh:mm:ss_mmm` with configurable delimiters."""
    date = re.escape(date_delimiter).join([
        "[0-9]{4}",
        "(?:0[1-9]|1[0-2])",
        "(?:0[1-9]|[12][0-9]|3[01])",
    ])
    time = re.escape(time_delimiter).join([
        "(?:[01][0-9]|2[0-3])",
        "(?:[0-5][0-9])",
        "(?:[0-5][0-9])",
    ])
    return "^" + re.escape(portion_delimiter).join([date, time, "(?:[0-9]{3})"]) + "$"


def utc_datetime(name: str, *, date_delimiter: str = "/", time_delimiter: str = ":",
                 portion_delimiter: str = "_", **options: Any) -> FieldDescriptor:
    return FieldDescriptor(
        name,
        FieldKind.STRING,
        max_length=256,
        pattern=utc_datetime_pattern(date_delimiter, time_delimiter, portion_delimiter),
        **options,
    )


def label_string_value(name: str, **options: Any) -> FieldDescriptor:
    """Object mapping non-empty keys to label strings."""
    return FieldDescriptor(name, FieldKind.OBJECT, value_descriptor=label("value"), **options)


def timestamp(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.TIMESTAMP, **options)


def boolean(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.BOOLEAN, **options)


def integer(name: str, **options: Any) -> FieldDescriptor:
    return FieldDescriptor(name, FieldKind.INTEGER, **options)
