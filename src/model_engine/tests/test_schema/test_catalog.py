import re

import pytest

from model_engine.exceptions import ValidationError
from model_engine.schema import FieldKind, catalog, derive_schemas


def validator_for(descriptor):
    return derive_schemas("t", [descriptor]).create


@pytest.mark.parametrize(
    "descriptor, valid, invalid",
    [
        (catalog.integer_key(), 1, 0),
        (catalog.integer_key(), catalog.INTEGER_KEY_MAX, catalog.INTEGER_KEY_MAX + 1),
        (catalog.big_integer_key(), "9007199254740993", "0123"),
        (catalog.non_negative_big_integer("n"), "0", "-1"),
        (catalog.label("v"), "x" * 256, "x" * 257),
        (catalog.description("v"), "x" * 4096, "x" * 4097),
        (catalog.email("v"), "someone@example.com", "someone.example.com"),
        (catalog.token("v"), "abc_123-x", "Abc"),
        (catalog.hash_string("v"), "a" * 64, "g" * 64),
        (catalog.http_uri("v"), "https://example.com/a", "ftp://example.com"),
        (catalog.http_uri("v"), "http://example.com", "example.com/a"),
        (catalog.email("v"), "first.last+tag@example.co.uk", "someone@"),
        (catalog.ip_address("v"), "2001:db8::1", "300.1.1.1"),
        (catalog.utc_datetime("v"), "2024/02/29_23:59:59_999", "2024-02-29T23:59:59"),
        (catalog.label_string_value("v"), {"en": "Label"}, {"": "Label"}),
    ],
)
def test_catalog_descriptors(descriptor, valid, invalid):
    schema = validator_for(descriptor)
    schema.validate({descriptor.name: valid})

    with pytest.raises(ValidationError):
        schema.validate({descriptor.name: invalid})


def test_string_accepts_empty_string():
    validator_for(catalog.string("v")).validate({"v": ""})


def test_ip_address_accepts_v4():
    validator_for(catalog.ip_address("v")).validate({"v": "192.168.0.1"})


def test_utc_datetime_pattern_with_custom_delimiters():
    pattern = catalog.utc_datetime_pattern(date_delimiter="-", time_delimiter=".", portion_delimiter=" ")

    assert re.match(pattern, "2024-01-31 10.20.30 400")
    # "." is literal, not a wildcard
    assert not re.match(pattern, "2024-01-31 10:20:30 400")


def test_keys_are_integer_or_string_kinds():
    assert catalog.integer_key().kind is FieldKind.INTEGER
    assert catalog.big_integer_key().kind is FieldKind.STRING


def test_http_uri_accepts_path_and_query():
    validator_for(catalog.http_uri("v")).validate({"v": "https://example.com:8443/a/b?c=1#d"})


def test_email_error_is_reported_on_the_field():
    with pytest.raises(ValidationError) as exc_info:
        validator_for(catalog.email("v")).validate({"v": "no-at-sign"})
    assert list(exc_info.value.details) == ["v"]
