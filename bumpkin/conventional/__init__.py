"""Conventional Commits classification and bump recommendation."""

from .analyzer import AnalysisResult, analyze, analyze_commits
from .parser import OTHER, STANDARD_TYPES, ClassifiedCommit, classify, is_footer_line

__all__ = [
    "OTHER",
    "STANDARD_TYPES",
    "AnalysisResult",
    "ClassifiedCommit",
    "analyze",
    "analyze_commits",
    "classify",
    "is_footer_line",
]
