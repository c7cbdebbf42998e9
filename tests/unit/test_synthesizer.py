# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from rca.model import Annotation
from rca.synthesizer import classify_sample, synthesize_gap_annotations


def _annotation(start: int, end: int) -> Annotation:
    return Annotation(line_start=start, line_end=end, text="desc", kind="info")


def _source(total_lines: int, overrides: dict[int, str] | None = None) -> str:
    overrides = overrides or {}
    return "\n".join(
        overrides.get(line, f"value_{line} = {line}") for line in range(1, total_lines + 1)
    )


def test_ph4_gap_001_fills_only_the_uncovered_quintile() -> None:
    existing = [_annotation(1, 10), _annotation(41, 50), _annotation(81, 90), _annotation(161, 170)]
    source = _source(200, {125: "class Widget:"})

    synthesized = synthesize_gap_annotations(200, existing, source)

    assert len(synthesized) == 1
    annotation = synthesized[0]
    assert (annotation.line_start, annotation.line_end) == (135, 145)
    assert annotation.kind == "class"
    assert annotation.provenance == "synthetic"
    assert annotation.synthetic
    assert annotation.expandable
    assert "lines 121-160" in annotation.text


def test_ph4_gap_002_samples_at_most_ten_lines_from_quintile_start() -> None:
    existing = [_annotation(1, 10), _annotation(41, 50), _annotation(81, 90), _annotation(161, 170)]
    source = _source(200, {131: "def helper():"})

    synthesized = synthesize_gap_annotations(200, existing, source)

    assert synthesized[0].kind == "info"
    assert synthesized[0].text.startswith("Code section 4 (lines 121-160)")


def test_ph4_gap_003_classification_rules_apply_in_priority_order() -> None:
    assert classify_sample(["import os", "def main():"]).kind == "function"  # type: ignore[union-attr]
    assert classify_sample(["interface Shape {", "export default Shape"]).kind == "class"  # type: ignore[union-attr]
    imports = classify_sample(["import React from 'react'"])
    assert imports is not None
    assert (imports.kind, imports.label) == ("info", "Module imports and dependencies")
    node_imports = classify_sample(["lodash = require('lodash')"])
    assert node_imports is not None and node_imports.name == "imports"
    exports = classify_sample(["module.exports = router"])
    assert exports is not None
    assert (exports.kind, exports.label) == ("important", "Module exports and API surface")
    assert classify_sample(["x = 1", "y = 2"]) is None
    assert classify_sample([]) is None


def test_ph4_gap_004_same_input_always_yields_same_annotations() -> None:
    source = _source(100, {41: "async function load() {"})

    first = synthesize_gap_annotations(100, [_annotation(1, 5)], source)
    second = synthesize_gap_annotations(100, [_annotation(1, 5)], source)

    assert first == second
    assert [a.kind for a in first] == ["info", "function", "info", "info"]


def test_ph4_gap_005_no_synthesis_when_every_quintile_is_covered() -> None:
    existing = [_annotation(line, line + 2) for line in (1, 21, 41, 61, 81)]

    assert synthesize_gap_annotations(100, existing, _source(100)) == []


def test_ph4_gap_006_ranges_are_clamped_to_the_file() -> None:
    synthesized = synthesize_gap_annotations(6, [], _source(6))

    assert len(synthesized) == 5
    for annotation in synthesized:
        assert 1 <= annotation.line_start <= annotation.line_end <= 6


def test_ph4_gap_007_degenerate_quintiles_of_short_files_are_skipped() -> None:
    synthesized = synthesize_gap_annotations(3, [], _source(3))

    assert len(synthesized) == 3
    for annotation in synthesized:
        assert 1 <= annotation.line_start <= annotation.line_end <= 3
