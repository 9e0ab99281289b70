# tests/unit/domain/value_objects/test_opinion_value_objects.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from counsel_core.domain.enums.legal_opinion import LegalSystem
from counsel_core.domain.exceptions.lifecycle import ValidationFailedError
from counsel_core.domain.value_objects.opinion import (
    BackgroundContext,
    Jurisdiction,
    LegalQuestion,
    OpinionNumber,
    OpinionSubject,
    RelevantFacts,
)


def test_opinion_number_generate_and_parts() -> None:
    number = OpinionNumber.generate(datetime(2025, 3, 9, tzinfo=UTC), sequence=42)

    assert number.value == "OP-20250309-0042"
    assert number.date_part == "20250309"
    assert number.sequence == 42


def test_opinion_number_random_sequence_is_well_formed() -> None:
    number = OpinionNumber.generate()
    assert OpinionNumber(number.value) == number


@pytest.mark.parametrize("raw", ["", "OP-2025-0001", "op-20250101-0001", "OP-20250101-12345"])
def test_opinion_number_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValidationFailedError, match="OP-YYYYMMDD-NNNN"):
        OpinionNumber(raw)


def test_opinion_number_sequence_bounds() -> None:
    with pytest.raises(ValidationFailedError, match="0..9999"):
        OpinionNumber.generate(sequence=10_000)


def test_subject_is_stripped_and_bounded() -> None:
    assert OpinionSubject("   Contract termination   ").value == "Contract termination"

    with pytest.raises(ValidationFailedError, match="Subject must be between 10 and 200"):
        OpinionSubject("short")
    with pytest.raises(ValidationFailedError, match="Subject"):
        OpinionSubject("x" * 201)


def test_legal_question_requires_question_mark() -> None:
    ok = "Is the non-compete clause in the employment agreement enforceable here?"
    assert LegalQuestion(ok).value == ok

    with pytest.raises(ValidationFailedError, match="question mark"):
        LegalQuestion("x" * 60)
    with pytest.raises(ValidationFailedError, match="between 50 and 2000"):
        LegalQuestion("Is it legal?")


@pytest.mark.parametrize("cls", [BackgroundContext, RelevantFacts])
def test_long_text_fields_need_at_least_100_chars(cls: type) -> None:
    assert cls("a" * 100).value == "a" * 100
    with pytest.raises(ValidationFailedError, match="between 100 and 5000"):
        cls("a" * 99)


def test_jurisdiction_dict_round_trip_and_str() -> None:
    j = Jurisdiction(
        country=" SA ", legal_system="sharia_law", region="Riyadh Province", city="Riyadh"
    )

    assert j.country == "SA"
    assert j.legal_system is LegalSystem.SHARIA_LAW
    assert Jurisdiction.from_dict(j.to_dict()) == j
    assert str(j) == "Riyadh, Riyadh Province, SA"


def test_jurisdiction_requires_country() -> None:
    with pytest.raises(ValidationFailedError, match="country is required"):
        Jurisdiction(country="  ")
