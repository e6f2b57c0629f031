# =============================================================================
# Naive Bayes Spam Classifier
# =============================================================================
# Scores an unknown message against a trained Corpus.
#
# How it works:
#   1. Start each class at its log prior: ln(messages in class / all messages)
#   2. For every token in the message add, per class,
#        ln((count + 1) / (total tokens in class + 1))
#      where count is 0 for tokens the class has never seen (Laplace
#      smoothing keeps unseen tokens from zeroing out the product)
#   3. The class with the larger sum wins
#
# Everything stays in the log domain: the sums would underflow to zero as
# plain probabilities after a few hundred tokens.
#
# Classification only reads the trained tables; it never writes to them.
# =============================================================================

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from mailsieve.spam.scanner import TokenScanner
from mailsieve.spam.table import Corpus, CorpusLabel, TokenTable
from mailsieve.spam.tokenizer import Tokenizer
from mailsieve.store import ProbingHashTable


logger = logging.getLogger(__name__)


def bayes(table: TokenTable, token: str) -> float:
    """
    Laplace-smoothed log likelihood of token within a table.

    Args:
        table: Trained token table.
        token: Token to score.

    Returns:
        ln((count + 1) / (total_token_count + 1)), with count 0 for
        tokens the table has never seen.

    Example:
        With total_token_count=99, an unseen token scores ln(1/100) and a
        token seen 4 times scores ln(5/100).
    """
    count = table.lookup(token) or 0
    return math.log((count + 1) / (table.total_token_count + 1))


def log_prior(messages: int, total_messages: int) -> float:
    """ln(messages / total_messages); -inf for a class with no messages."""
    if messages == 0:
        return -math.inf
    return math.log(messages / total_messages)


@dataclass
class TokenScore:
    """
    Per-token entry of the classification working table.

    Attributes:
        count: Occurrences of the token in the unknown message.
        normal: Summed log contribution to the normal score.
        spam: Summed log contribution to the spam score.
    """
    count: int = 0
    normal: float = 0.0
    spam: float = 0.0

    @property
    def leaning(self) -> CorpusLabel:
        """Which class this token pulls towards."""
        return CorpusLabel.NORMAL if self.normal > self.spam else CorpusLabel.SPAM

    @property
    def difference(self) -> float:
        """Absolute gap between the two contributions."""
        return abs(self.normal - self.spam)


@dataclass
class Verdict:
    """
    Result of classifying one message.

    Attributes:
        label: NORMAL if normal_score > spam_score, otherwise SPAM.
        normal_score: Log prior plus all token contributions, normal class.
        spam_score: Log prior plus all token contributions, spam class.
        normal_prior: Prior probability of the normal class.
        spam_prior: Prior probability of the spam class.
        token_scores: Token -> TokenScore, for diagnostics.
    """
    label: CorpusLabel
    normal_score: float
    spam_score: float
    normal_prior: float = 0.0
    spam_prior: float = 0.0
    token_scores: ProbingHashTable = field(default_factory=ProbingHashTable)

    @classmethod
    def from_scores(cls, normal_score: float, spam_score: float, **kwargs) -> "Verdict":
        """Build a verdict, picking the label from the two scores."""
        label = CorpusLabel.NORMAL if normal_score > spam_score else CorpusLabel.SPAM
        return cls(label=label, normal_score=normal_score, spam_score=spam_score, **kwargs)

    @property
    def is_spam(self) -> bool:
        """Returns True if the message was classified as spam."""
        return self.label is CorpusLabel.SPAM

    @property
    def difference(self) -> float:
        """Absolute gap between the two class scores."""
        return abs(self.normal_score - self.spam_score)

    @property
    def status_line(self) -> str:
        """
        The verdict as a mail header line.

        Example:
            X-Spam-Status: SPAM, N: -120.30, S: -95.70, Diff: 24.60
        """
        return (
            f"X-Spam-Status: {self.label.name}, "
            f"N: {self.normal_score:.2f}, S: {self.spam_score:.2f}, "
            f"Diff: {self.difference:.2f}"
        )


def classify(
    source: Iterable[str],
    normal: TokenTable,
    spam: TokenTable,
    tokenizer: Tokenizer,
) -> Verdict:
    """
    Classify a single message.

    The message is scanned exactly as training scans a mailbox (same
    header filtering, same n-gram wraparound) except that it is read as
    one message: no postmark is expected.

    Args:
        source: Lines of the unknown message.
        normal: Trained normal token table.
        spam: Trained spam token table.
        tokenizer: The tokenizer both tables were built with.

    Returns:
        The Verdict, including the per-token working table.

    Raises:
        DivisionByZeroError: If neither table has any messages.
    """
    total_messages = normal.message_count + spam.message_count
    if total_messages == 0:
        raise DivisionByZeroError(
            "Cannot classify: both corpora are empty. Train the model first."
        )

    normal_prior = normal.message_count / total_messages
    spam_prior = spam.message_count / total_messages
    running_normal = log_prior(normal.message_count, total_messages)
    running_spam = log_prior(spam.message_count, total_messages)

    token_scores = ProbingHashTable()
    scanner = TokenScanner(tokenizer, multi_message=False)

    for token in scanner.scan(source):
        normal_part = bayes(normal, token)
        spam_part = bayes(spam, token)
        running_normal += normal_part
        running_spam += spam_part

        score = token_scores.get(token)
        if score is None:
            score = TokenScore()
            token_scores.put(token, score)
        score.count += 1
        score.normal += normal_part
        score.spam += spam_part

    verdict = Verdict.from_scores(
        running_normal,
        running_spam,
        normal_prior=normal_prior,
        spam_prior=spam_prior,
        token_scores=token_scores,
    )
    logger.debug(f"{len(token_scores)} distinct token(s) scored: {verdict.status_line}")
    return verdict


class SpamClassifier:
    """
    Classifies messages against a trained Corpus.

    Usage:
        >>> classifier = SpamClassifier(load_model(Path("mail.stat")))
        >>> with LineSource.open("unknown.eml") as source:
        ...     verdict = classifier.classify(source)
        >>> print(verdict.status_line)
        X-Spam-Status: NORMAL, N: -812.44, S: -840.19, Diff: 27.75

    Attributes:
        corpus: The trained model. Read only.
    """

    def __init__(self, corpus: Corpus) -> None:
        """
        Initialize the classifier.

        Args:
            corpus: Trained model to score against.
        """
        self.corpus = corpus

    @property
    def is_trained(self) -> bool:
        """Returns True if at least one message has been trained."""
        return self.corpus.total_messages > 0

    def classify(self, source: Iterable[str]) -> Verdict:
        """
        Classify one message with the corpus' own tokenizer.

        Raises:
            DivisionByZeroError: If the corpus has no trained messages.
        """
        if not self.is_trained:
            raise DivisionByZeroError(
                "Cannot classify: both corpora are empty. Train the model first."
            )
        return classify(
            source,
            self.corpus.normal,
            self.corpus.spam,
            self.corpus.create_tokenizer(),
        )


# =============================================================================
# Exceptions
# =============================================================================

class DivisionByZeroError(ZeroDivisionError):
    """Raised when classifying against a model with no trained messages."""
    pass
