# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import pytest

from rca.coverage import analyze_coverage, quintile_bounds, quintile_index
from rca.model import Annotation


def _annotation(start: int, end: int) -> Annotation:
    return Annotation(line_start=start, line_end=end, text="desc", kind="info")


def test_ph3_cov_001_quintile_bounds_use_floor_boundaries() -> None:
    assert [(q.start_line, q.end_line) for q in quintile_bounds(100)] == [
        (1, 20),
        (21, 40),
        (41, 60),
        (61, 80),
        (81, 100),
    ]
    assert [(q.start_line, q.end_line) for q in quintile_bounds(7)] == [
        (1, 1),
        (2, 2),
        (3, 4),
        (5, 5),
        (6, 7),
    ]


def test_ph3_cov_002_short_files_have_degenerate_quintiles() -> None:
    quintiles = quintile_bounds(3)

    assert [q.index for q in quintiles if q.is_degenerate] == [0, 2]
    assert quintiles[-1].end_line == 3


def test_ph3_cov_003_quintile_index_respects_boundaries_and_clamps() -> None:
    quintiles = quintile_bounds(100)

    assert quintile_index(1, quintiles) == 0
    assert quintile_index(20, quintiles) == 0
    assert quintile_index(21, quintiles) == 1
    assert quintile_index(100, quintiles) == 4
    assert quintile_index(150, quintiles) == 4


def test_ph3_cov_004_empty_annotations_report_zero_coverage() -> None:
    report = analyze_coverage([], total_lines=50)

    assert report.max_annotated_line == 0
    assert report.coverage_percent == 0.0
    assert report.quintile_counts == (0, 0, 0, 0, 0)
    assert report.clustering_detected


def test_ph3_cov_005_single_early_annotation_is_clustered() -> None:
    report = analyze_coverage([_annotation(1, 5)], total_lines=100)

    assert report.max_annotated_line == 5
    assert report.coverage_percent == pytest.approx(5.0)
    assert report.quintile_counts == (1, 0, 0, 0, 0)
    assert report.empty_quintiles == 4
    assert report.clustering_detected


def test_ph3_cov_006_well_distributed_annotations_are_not_clustered() -> None:
    annotations = [
        _annotation(1, 10),
        _annotation(21, 30),
        _annotation(41, 50),
        _annotation(61, 70),
        _annotation(81, 95),
    ]

    report = analyze_coverage(annotations, total_lines=100)

    assert report.quintile_counts == (1, 1, 1, 1, 1)
    assert report.coverage_percent == pytest.approx(95.0)
    assert not report.clustering_detected


def test_ph3_cov_007_high_coverage_with_two_empty_quintiles_is_clustered() -> None:
    annotations = [_annotation(1, 5), _annotation(30, 35), _annotation(85, 90)]

    report = analyze_coverage(annotations, total_lines=100)

    assert report.coverage_percent == pytest.approx(90.0)
    assert report.empty_quintiles == 2
    assert report.clustering_detected


def test_ph3_cov_008_low_coverage_alone_triggers_clustering() -> None:
    annotations = [
        _annotation(1, 5),
        _annotation(21, 25),
        _annotation(41, 45),
        _annotation(61, 65),
        _annotation(81, 82),
    ]

    report = analyze_coverage(annotations, total_lines=200)

    assert report.coverage_percent < 80
    assert report.clustering_detected


def test_ph3_cov_009_rejects_non_positive_line_count() -> None:
    with pytest.raises(ValueError):
        analyze_coverage([], total_lines=0)


def test_ph3_cov_010_quintile_midpoint_rounds_down() -> None:
    quintiles = quintile_bounds(200)

    assert [quintile.midpoint for quintile in quintiles] == [20, 60, 100, 140, 180]
    assert quintile_bounds(7)[1].midpoint == 2
