# =============================================================================
# Tests for naive Bayes scoring
# =============================================================================

import math

import pytest

from mailsieve.spam import (
    Corpus,
    CorpusLabel,
    DivisionByZeroError,
    SpamClassifier,
    TokenTable,
    Verdict,
    WhitespaceTokenizer,
    bayes,
    classify,
)
from mailsieve.spam.classifier import TokenScore, log_prior
from mailsieve.storage import LineSource, encode


@pytest.fixture
def table_of_99():
    table = TokenTable()
    table.add_token("cash", 4)
    table.add_token("filler", 95)
    return table


# =============================================================================
# Scoring primitives
# =============================================================================

def test_bayes_unseen_token(table_of_99):
    assert bayes(table_of_99, "unseen") == pytest.approx(math.log(1 / 100))


def test_bayes_seen_token(table_of_99):
    assert bayes(table_of_99, "cash") == pytest.approx(math.log(5 / 100))


def test_bayes_empty_table():
    assert bayes(TokenTable(), "anything") == 0.0


def test_log_prior():
    assert log_prior(1, 4) == pytest.approx(math.log(0.25))
    assert log_prior(0, 4) == -math.inf


# =============================================================================
# Verdict
# =============================================================================

def test_verdict_spam():
    verdict = Verdict.from_scores(-120.3, -95.7)
    assert verdict.label is CorpusLabel.SPAM
    assert verdict.is_spam
    assert verdict.difference == pytest.approx(24.6)
    assert verdict.status_line == "X-Spam-Status: SPAM, N: -120.30, S: -95.70, Diff: 24.60"


def test_verdict_normal():
    verdict = Verdict.from_scores(-10.0, -12.5)
    assert verdict.label is CorpusLabel.NORMAL
    assert verdict.status_line == "X-Spam-Status: NORMAL, N: -10.00, S: -12.50, Diff: 2.50"


def test_tie_goes_to_spam():
    assert Verdict.from_scores(-5.0, -5.0).is_spam


def test_token_score_leaning():
    score = TokenScore(count=1, normal=-2.0, spam=-3.5)
    assert score.leaning is CorpusLabel.NORMAL
    assert score.difference == pytest.approx(1.5)


# =============================================================================
# Classification
# =============================================================================

def test_classifies_spam(trained_corpus, spam_message):
    verdict = SpamClassifier(trained_corpus).classify(LineSource.from_text(spam_message))

    assert verdict.is_spam
    assert verdict.normal_prior == pytest.approx(0.5)
    assert verdict.spam_prior == pytest.approx(0.5)
    # none of the 9 tokens occur in the normal corpus (26 tokens)
    assert verdict.normal_score == pytest.approx(math.log(0.5) + 9 * math.log(1 / 27))


def test_classifies_normal(trained_corpus, normal_message):
    verdict = SpamClassifier(trained_corpus).classify(LineSource.from_text(normal_message))
    assert verdict.label is CorpusLabel.NORMAL


def test_working_table(trained_corpus, spam_message):
    verdict = SpamClassifier(trained_corpus).classify(LineSource.from_text(spam_message))

    cash = verdict.token_scores["cash"]
    assert cash.count == 2
    assert cash.normal == pytest.approx(2 * math.log(1 / 27))
    assert cash.spam == pytest.approx(2 * math.log(5 / 27))
    assert cash.leaning is CorpusLabel.SPAM
    assert len(verdict.token_scores) == 7


def test_classification_does_not_modify_model(trained_corpus, spam_message):
    before = encode(trained_corpus)
    SpamClassifier(trained_corpus).classify(LineSource.from_text(spam_message))
    assert encode(trained_corpus) == before


def test_empty_corpora_raise():
    with pytest.raises(DivisionByZeroError):
        classify(["hello"], TokenTable(), TokenTable(), WhitespaceTokenizer())
    with pytest.raises(DivisionByZeroError):
        SpamClassifier(Corpus()).classify(["hello"])


def test_one_sided_corpus_still_classifies():
    corpus = Corpus()
    corpus.train(CorpusLabel.SPAM, ["Subject: cash"], "whitespace")

    verdict = SpamClassifier(corpus).classify(["Subject: cash"])

    assert verdict.is_spam
    assert verdict.normal_score == -math.inf
