from __future__ import annotations

import threading
from pathlib import Path

import pytest

from geochunk import Classifier, DataLoadError, InvalidCodeError, InvariantViolation
from geochunk.core.config import GeochunkConfig
from geochunk.core.errors import ConfigError
from geochunk.population.table import PrefixPopulation


def test_classifies_sample_zip_codes_as_expected(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    assert classifier.chunk_for("01000") == "010_0"
    assert classifier.chunk_for("07720") == "077_1"


def test_from_path_matches_from_rows(reference_rows, reference_csv: Path) -> None:
    by_rows = Classifier.from_rows(250_000, reference_rows)
    by_path = Classifier.from_path(250_000, reference_csv)

    assert by_path.mapping == by_rows.mapping
    assert by_path.digest() == by_rows.digest()
    assert by_path == by_rows


def test_from_config(reference_csv: Path) -> None:
    config = GeochunkConfig(target_population=250_000, population_path=reference_csv)
    classifier = Classifier.from_config(config)

    assert classifier.target_population == 250_000
    assert classifier.code_length == 5
    assert classifier.chunk_for("07720") == "077_1"


def test_from_config_requires_population_path() -> None:
    with pytest.raises(ConfigError):
        Classifier.from_config(GeochunkConfig())


def test_chunk_for_is_total_over_well_formed_codes(synthetic_rows) -> None:
    classifier = Classifier.from_rows(60_000, synthetic_rows)
    known = set(classifier.chunk_ids())

    for value in range(100_000):
        assert classifier.chunk_for(f"{value:05d}") in known


def test_codes_missing_from_population_data_still_resolve(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    assert classifier.chunk_for("99999") == "_0"
    assert classifier.chunk_for("01999") == "01_0"
    assert classifier.chunk_for("07799") == "077_1"


def test_chunk_for_is_deterministic(synthetic_rows) -> None:
    first = Classifier.from_rows(60_000, synthetic_rows)
    second = Classifier.from_rows(60_000, list(reversed(synthetic_rows)))

    assert first.digest() == second.digest()
    for value in range(0, 100_000, 37):
        code = f"{value:05d}"
        assert first.chunk_for(code) == second.chunk_for(code)


def test_chunk_count_shrinks_as_target_grows(reference_rows) -> None:
    counts = [
        len(Classifier.from_rows(target, reference_rows).chunk_ids())
        for target in (250_000, 300_000, 500_000, 1_000_000)
    ]

    assert counts == [8, 4, 3, 1]
    assert counts == sorted(counts, reverse=True)


def test_short_code_is_invalid_input(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    with pytest.raises(InvalidCodeError) as excinfo:
        classifier.chunk_for("0772")
    assert excinfo.value.code == "E201_CODE_TOO_SHORT"
    with pytest.raises(InvalidCodeError):
        classifier.chunk_for("")
    # The classifier stays usable after a rejected query.
    assert classifier.chunk_for("07720") == "077_1"


def test_non_numeric_code_is_invalid_input(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    with pytest.raises(InvalidCodeError) as excinfo:
        classifier.chunk_for("07A20")
    assert excinfo.value.code == "E202_CODE_NOT_NUMERIC"


def test_extended_codes_match_on_leading_digits(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    assert classifier.chunk_for("07720-1234") == "077_1"
    assert classifier.chunk_for_many(["01000", "077201234"]) == ["010_0", "077_1"]


def test_longest_prefix_wins() -> None:
    classifier = Classifier(
        target_population=100,
        code_length=5,
        chunk_id_for_prefix={"12": "short", "12345": "long"},
    )

    assert classifier.chunk_for("12345") == "long"
    assert classifier.chunk_for("12346") == "short"


def test_unmatched_code_is_an_invariant_violation() -> None:
    classifier = Classifier(
        target_population=100,
        code_length=5,
        chunk_id_for_prefix={"12": "12"},
    )

    with pytest.raises(InvariantViolation) as excinfo:
        classifier.chunk_for("99999")
    assert excinfo.value.code == "E903_NO_CHUNK_MATCH"


def test_empty_population_maps_everything_to_root_chunk() -> None:
    classifier = Classifier.from_rows(250_000, [])

    assert dict(classifier.mapping) == {"": ""}
    assert classifier.chunk_for("12345") == ""


def test_malformed_rows_fail_construction() -> None:
    with pytest.raises(DataLoadError):
        Classifier.from_rows(250_000, [("01000", "lots")])
    with pytest.raises(DataLoadError):
        Classifier.from_rows(250_000, [("0100", 5)])
    with pytest.raises(DataLoadError):
        Classifier.from_rows(250_000, [("01000", 5, "extra")])


def test_invalid_target_fails_construction(reference_rows) -> None:
    with pytest.raises(ConfigError):
        Classifier.from_rows(0, reference_rows)


def test_mapping_is_immutable(reference_rows) -> None:
    classifier = Classifier.from_rows(250_000, reference_rows)

    with pytest.raises(TypeError):
        classifier.mapping["0100"] = "other"  # type: ignore[index]
    with pytest.raises(AttributeError):
        classifier.target_population = 1  # type: ignore[misc]


def test_source_mapping_changes_do_not_leak() -> None:
    source = {"": "all"}
    classifier = Classifier(target_population=10, code_length=5, chunk_id_for_prefix=source)
    source["1"] = "other"

    assert classifier.chunk_for("12345") == "all"
    assert len(classifier) == 1


def test_build_uses_table_code_length() -> None:
    table = PrefixPopulation.from_rows([("123", 5), ("456", 5)], code_length=3)
    classifier = Classifier.build(6, table)

    assert classifier.code_length == 3
    assert classifier.chunk_for("123") == "_0"
    assert classifier.chunk_for("456") == "_1"
    assert classifier.chunk_for("999") == "_1"


def test_concurrent_readers_agree(synthetic_rows) -> None:
    classifier = Classifier.from_rows(60_000, synthetic_rows)
    codes = [f"{value:05d}" for value in range(0, 100_000, 11)]
    expected = classifier.chunk_for_many(codes)
    results: list[list[str]] = []

    def _read() -> None:
        results.append(classifier.chunk_for_many(codes))

    threads = [threading.Thread(target=_read) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [expected] * 4


def test_large_unsigned_populations_build() -> None:
    classifier = Classifier.from_rows(2**64 - 1, [("01000", 2**63 + 10)])

    assert dict(classifier.mapping) == {"": ""}
    assert classifier.chunk_for("01000") == ""


@pytest.mark.parametrize("target", [0, -1, True, 1.5])
def test_direct_construction_validates_target(target) -> None:
    with pytest.raises(ConfigError) as excinfo:
        Classifier(target_population=target, code_length=5, chunk_id_for_prefix={"": ""})
    assert excinfo.value.code == "E301_TARGET_INVALID"


@pytest.mark.parametrize("code_length", [0, -3, False, "5"])
def test_direct_construction_validates_code_length(code_length) -> None:
    with pytest.raises(ConfigError) as excinfo:
        Classifier(target_population=10, code_length=code_length, chunk_id_for_prefix={"": ""})
    assert excinfo.value.code == "E304_CODE_LENGTH_INVALID"


def test_classifiers_are_hashable_and_equal_by_mapping(reference_rows) -> None:
    first = Classifier.from_rows(250_000, reference_rows)
    second = Classifier.from_rows(250_000, list(reversed(reference_rows)))
    other = Classifier.from_rows(300_000, reference_rows)

    assert hash(first) == hash(second)
    assert first == second
    assert first != other
    assert len({first, second, other}) == 2
