"""Tests for request-boundary parsing."""
from decimal import Decimal

import pytest
from werkzeug.datastructures import MultiDict

from catalog_admin.errors import ValidationError
from catalog_admin.forms import (
    normalize_option_ids,
    paginate_args,
    parse_bool,
    parse_decimal,
    parse_id,
    parse_json_list,
    parse_status,
)


@pytest.mark.parametrize(
    "data, expected",
    [
        (MultiDict([("variation_option_id[1]", "7"), ("variation_option_id[0]", "3")]), [3, 7]),
        (MultiDict([("variation_option_id", "3"), ("variation_option_id", "7")]), [3, 7]),
        (MultiDict([("variation_option_id[]", "3"), ("variation_option_id[]", "3")]), [3]),
        ({"variation_option_id": [3, "7", 3]}, [3, 7]),
        ({"variation_option_id": "[3, 7]"}, [3, 7]),
        ({"variation_option_id": '["3","7"]'}, [3, 7]),
        ({"variation_option_id": "3, 7,,"}, [3, 7]),
        ({"variation_option_ids": "5"}, [5]),
        ({"variation_option_id": ""}, []),
    ],
)
def test_normalize_option_ids_encodings(data, expected):
    assert normalize_option_ids(data) == expected


def test_normalize_option_ids_absent():
    assert normalize_option_ids({"sku": "A"}) is None


@pytest.mark.parametrize("raw", ["abc", "[1, 2", "0", "-4", "1.5"])
def test_normalize_option_ids_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        normalize_option_ids({"variation_option_id": raw})


def test_parse_status():
    assert parse_status(None) == 1
    assert parse_status("") == 1
    assert parse_status("0") == 0
    with pytest.raises(ValidationError):
        parse_status("yes")


def test_parse_bool():
    assert parse_bool("true") is True
    assert parse_bool("False") is False
    assert parse_bool(1) is True
    assert parse_bool(None) is False
    with pytest.raises(ValidationError):
        parse_bool("maybe")


def test_parse_id():
    assert parse_id(" 12 ", "id") == 12
    for bad in (None, "", "x", 0, True):
        with pytest.raises(ValidationError, match="Invalid id"):
            parse_id(bad, "id")


def test_parse_decimal():
    assert parse_decimal("9.99", "price") == Decimal("9.99")
    for bad in ("", "NaN", "-1", "ten"):
        with pytest.raises(ValidationError):
            parse_decimal(bad, "price")


def test_parse_json_list():
    assert parse_json_list(None, "x") is None
    assert parse_json_list("", "x") == []
    assert parse_json_list('["a"]', "x") == ["a"]
    with pytest.raises(ValidationError):
        parse_json_list('{"a": 1}', "x")


@pytest.mark.parametrize(
    "args, expected",
    [
        ({}, (1, 10)),
        ({"page": "3", "limit": "25"}, (3, 25)),
        ({"page": "-2", "limit": "0"}, (1, 1)),
        ({"page": "x", "limit": "5000"}, (1, 100)),
    ],
)
def test_paginate_args(args, expected):
    assert paginate_args(args) == expected
