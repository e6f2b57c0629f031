# =============================================================================
# Rendering Module
# =============================================================================
# Turns corpora and verdicts into human-readable text reports.
# =============================================================================

from mailsieve.rendering.report import (
    classification_report,
    corpus_report,
    write_classification_report,
    write_corpus_report,
)

__all__ = [
    "corpus_report",
    "classification_report",
    "write_corpus_report",
    "write_classification_report",
]
