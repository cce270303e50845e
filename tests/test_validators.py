from __future__ import annotations

import pytest

from academy_manager.common.validators import (
    clean_text,
    optional_date,
    optional_instant,
    optional_text,
    parse_choice,
    require_min_length,
    require_non_empty,
)
from academy_manager.core.enums import EventType
from academy_manager.core.exceptions import ValidationError


def test_clean_text_strips_and_accepts_none():
    assert clean_text("  Άρης ", "Αντίπαλος") == "Άρης"
    assert clean_text(None, "Αντίπαλος") == ""


@pytest.mark.parametrize("value", [123, ["a"], {"a": 1}, 1.5])
def test_text_validators_reject_non_strings(value):
    with pytest.raises(ValidationError):
        clean_text(value, "Τίτλος")
    with pytest.raises(ValidationError):
        require_non_empty(value, "Τίτλος")
    with pytest.raises(ValidationError):
        optional_text(value)
    with pytest.raises(ValidationError):
        require_min_length(value, "Κωδικός", 6)


def test_dates_and_instants_reject_wrong_types():
    with pytest.raises(ValidationError):
        optional_date(20150402, "Ημερομηνία γέννησης")
    with pytest.raises(ValidationError):
        optional_instant(1700000000, "startDate")


def test_parse_choice_rejects_unhashable_value():
    with pytest.raises(ValidationError):
        parse_choice(EventType, ["training"], "type")
