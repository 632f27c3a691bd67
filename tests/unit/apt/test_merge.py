"""
codenarc-converter — unit tests for cross-file rule merging

File: tests/unit/apt/test_merge.py
Last updated: 2026-10-19

Purpose
- Validate first-seen description priority, parameter union, and conflict reporting.
"""

from __future__ import annotations

import pytest
import structlog

from codenarc_converter.apt.merge import merge_all, merge_results
from codenarc_converter.apt.rule_entry import RuleEntry, RuleParameter


def _entry(name: str, description: str = "", *parameters: RuleParameter) -> RuleEntry:
    entry = RuleEntry(name=name, raw_description=description)
    for parameter in parameters:
        entry.add_parameter(parameter)
    return entry


@pytest.mark.unit
def test_first_description_wins_and_parameters_union() -> None:
    file_a = {"Foo": _entry("Foo", "D1")}
    file_b = {"Foo": _entry("Foo", "D2", RuleParameter(key="x"))}
    accumulator: dict[str, RuleEntry] = {}

    assert merge_results(accumulator, file_a, source_file="a.apt") == []
    conflicts = merge_results(accumulator, file_b, source_file="b.apt")

    assert list(accumulator) == ["Foo"]
    assert accumulator["Foo"].description == "D1"
    assert accumulator["Foo"].parameters == {RuleParameter(key="x")}
    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.rule == "Foo"
    assert conflict.kept_description == "D1"
    assert conflict.rejected_description == "D2"
    assert conflict.source_file == "b.apt"
    assert conflict.to_dict()["source_file"] == "b.apt"


@pytest.mark.unit
def test_blank_accumulator_description_adopts_source_description() -> None:
    accumulator = {"Foo": _entry("Foo", "  \n", RuleParameter(key="x"))}

    conflicts = merge_results(accumulator, {"Foo": _entry("Foo", "<p>Later</p>\n")})

    assert conflicts == []
    assert accumulator["Foo"].description == "<p>Later</p>"
    assert accumulator["Foo"].parameters == {RuleParameter(key="x")}


@pytest.mark.unit
def test_blank_source_description_is_not_a_conflict() -> None:
    accumulator = {"Foo": _entry("Foo", "D1")}

    conflicts = merge_results(accumulator, {"Foo": _entry("Foo", "", RuleParameter(key="y"))})

    assert conflicts == []
    assert accumulator["Foo"].description == "D1"


@pytest.mark.unit
def test_merging_same_source_twice_does_not_duplicate_parameters() -> None:
    source = {
        "Foo": _entry(
            "Foo",
            "D1",
            RuleParameter(key="x", description="X", default_value="1"),
            RuleParameter(key="y"),
        )
    }
    accumulator: dict[str, RuleEntry] = {}

    merge_results(accumulator, source)
    conflicts = merge_results(accumulator, source)

    assert len(accumulator["Foo"].parameters) == 2
    # Identical texts still count as a conflict.
    assert [conflict.rejected_description for conflict in conflicts] == ["D1"]


@pytest.mark.unit
def test_merged_entries_are_not_aliased_to_sources() -> None:
    source = {"Foo": _entry("Foo", "D1", RuleParameter(key="x"))}
    accumulator: dict[str, RuleEntry] = {}

    merge_results(accumulator, source)
    accumulator["Foo"].append_description(" more")
    accumulator["Foo"].add_parameter(RuleParameter(key="z"))

    assert accumulator["Foo"] is not source["Foo"]
    assert source["Foo"].description == "D1"
    assert source["Foo"].parameters == {RuleParameter(key="x")}


@pytest.mark.unit
def test_merge_all_folds_mappings_in_order() -> None:
    merged, conflicts = merge_all(
        [
            {"Foo": _entry("Foo", "D1"), "Bar": _entry("Bar")},
            {"Foo": _entry("Foo", "D2"), "Baz": _entry("Baz", "Z")},
            {"Bar": _entry("Bar", "B", RuleParameter(key="b"))},
        ]
    )

    assert list(merged) == ["Foo", "Bar", "Baz"]
    assert merged["Foo"].description == "D1"
    assert merged["Bar"].description == "B"
    assert merged["Bar"].parameters == {RuleParameter(key="b")}
    assert [conflict.rule for conflict in conflicts] == ["Foo"]


@pytest.mark.unit
def test_conflicts_are_logged_as_events() -> None:
    accumulator = {"Foo": _entry("Foo", "D1")}

    with structlog.testing.capture_logs() as captured:
        merge_results(accumulator, {"Foo": _entry("Foo", "D2")}, source_file="b.apt")

    assert captured == [
        {
            "event": "apt_description_conflict",
            "log_level": "info",
            "rule": "Foo",
            "source_file": "b.apt",
            "kept_description": "D1",
            "rejected_description": "D2",
        }
    ]
