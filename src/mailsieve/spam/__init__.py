# =============================================================================
# Spam Module
# =============================================================================
# Naive Bayes mail classification from two labeled training corpora.
#
# The pipeline:
#   - Tokenizers split one line of text into tokens
#   - The scanner decides which lines of a message are worth tokenizing
#     (From:/To:/Subject: headers and the body) and finds message
#     boundaries in mbox files
#   - Token tables count tokens per corpus (normal, spam)
#   - The classifier sums smoothed log likelihoods and picks a label
# =============================================================================

from mailsieve.spam.classifier import (
    DivisionByZeroError,
    SpamClassifier,
    TokenScore,
    Verdict,
    bayes,
    classify,
)
from mailsieve.spam.scanner import LineClassifier, LineState, TokenScanner
from mailsieve.spam.table import Corpus, CorpusLabel, TokenTable
from mailsieve.spam.tokenizer import (
    TOKENIZERS,
    HtmlAwareTokenizer,
    InvalidConfigError,
    NGramTokenizer,
    Tokenizer,
    TokenizerConfig,
    WhitespaceTokenizer,
    create_tokenizer,
)

__all__ = [
    "SpamClassifier",
    "Verdict",
    "TokenScore",
    "bayes",
    "classify",
    "DivisionByZeroError",
    "LineClassifier",
    "LineState",
    "TokenScanner",
    "Corpus",
    "CorpusLabel",
    "TokenTable",
    "Tokenizer",
    "TokenizerConfig",
    "WhitespaceTokenizer",
    "HtmlAwareTokenizer",
    "NGramTokenizer",
    "TOKENIZERS",
    "create_tokenizer",
    "InvalidConfigError",
]
