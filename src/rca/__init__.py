# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for annotation reconciliation components."""

from rca.coverage import analyze_coverage
from rca.fallback import generate_fallback_annotations
from rca.model import Annotation, CoverageReport, InvalidAnnotationRecordError
from rca.normalizer import normalize_model_text
from rca.parser import (
    MalformedModelOutputError,
    NoRecoverableAnnotationsError,
    ParseResult,
    parse_annotations,
)
from rca.reconciler import ReconcileResult, reconcile
from rca.synthesizer import synthesize_gap_annotations

__all__ = [
    "Annotation",
    "CoverageReport",
    "InvalidAnnotationRecordError",
    "MalformedModelOutputError",
    "NoRecoverableAnnotationsError",
    "ParseResult",
    "ReconcileResult",
    "analyze_coverage",
    "generate_fallback_annotations",
    "normalize_model_text",
    "parse_annotations",
    "reconcile",
    "synthesize_gap_annotations",
]
