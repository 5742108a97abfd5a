"""
tests/test_utils.py
Unit tests for featureforge.utils: case conversion, feature-key and enum
parsing, and the Timer context manager.
"""

from __future__ import annotations

import pytest

from featureforge.models import FeatureKey, Framework, Language
from featureforge.utils import (
    Timer,
    parse_enum_value,
    parse_feature_key,
    to_snake_case,
)

K = FeatureKey


class TestCaseConversion:
    def test_to_snake_case(self) -> None:
        assert to_snake_case("passwordReset") == "password_reset"
        assert to_snake_case("HATEOAS") == "hateoas"
        assert to_snake_case("already_snake") == "already_snake"
        assert to_snake_case("") == ""


class TestParseFeatureKey:
    @pytest.mark.parametrize(
        "name",
        ["passwordReset", "password_reset", "PASSWORD_RESET", "password-reset", " passwordReset "],
    )
    def test_spellings(self, name: str) -> None:
        assert parse_feature_key(name) == K.PASSWORD_RESET

    def test_acronyms_and_digits(self) -> None:
        assert parse_feature_key("HATEOAS") == K.HATEOAS
        assert parse_feature_key("I18N") == K.I18N
        assert parse_feature_key("etag_support") == K.ETAG_SUPPORT

    def test_every_key_round_trips(self) -> None:
        for key in FeatureKey:
            assert parse_feature_key(key.value) == key
            assert parse_feature_key(key.name) == key

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown feature 'telepathy'"):
            parse_feature_key("telepathy")


class TestParseEnumValue:
    def test_framework_spellings(self) -> None:
        assert parse_enum_value(Framework, "spring_boot") == Framework.SPRING_BOOT
        assert parse_enum_value(Framework, "ASPNET-CORE") == Framework.ASPNET_CORE

    def test_language_case_insensitive(self) -> None:
        assert parse_enum_value(Language, "Go") == Language.GO

    def test_unknown_lists_choices(self) -> None:
        with pytest.raises(ValueError, match="Expected one of: java"):
            parse_enum_value(Language, "cobol")


class TestTimer:
    def test_measures(self) -> None:
        with Timer("noop") as t:
            pass
        assert t.elapsed >= 0.0
        assert "noop" in repr(t)
