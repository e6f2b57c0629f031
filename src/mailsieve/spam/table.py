# =============================================================================
# Token Tables and Training
# =============================================================================
# Frequency statistics for the two training corpora.
#
#   - TokenTable: token -> count for one label (normal or spam), plus the
#     number of messages and the total number of tokens it was built from.
#   - Corpus: the pair of tables that make up a trained model, together
#     with the tokenizer configuration both were built with.
#
# Training appends: processing the same mailbox twice doubles every count.
# Callers decide what goes into a corpus; nothing here deduplicates.
# =============================================================================

import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace
from enum import Enum

from mailsieve.spam.scanner import TokenScanner
from mailsieve.spam.tokenizer import (
    InvalidConfigError,
    Tokenizer,
    TokenizerConfig,
    create_tokenizer,
    resolve_tokenizer_name,
)
from mailsieve.store import ProbingHashTable


logger = logging.getLogger(__name__)


class CorpusLabel(Enum):
    """The two classes a message can belong to."""
    NORMAL = "normal"
    SPAM = "spam"


class TokenTable:
    """
    Token counts for one corpus.

    Invariant: total_token_count is the sum of every stored count.

    Attributes:
        label: Which corpus this table holds.
        counts: Token -> occurrence count.
        message_count: Messages trained into this table.
        total_token_count: Tokens trained into this table.
    """

    def __init__(self, label: CorpusLabel = CorpusLabel.NORMAL) -> None:
        self.label = label
        self.counts = ProbingHashTable()
        self.message_count = 0
        self.total_token_count = 0

    @property
    def unique_token_count(self) -> int:
        """Number of distinct tokens."""
        return len(self.counts)

    def lookup(self, token: str) -> int | None:
        """Count for token, or None if it was never seen."""
        return self.counts.get(token)

    def add_token(self, token: str, count: int = 1) -> None:
        """Record count more occurrences of token."""
        current = self.counts.get(token, 0)
        self.counts.put(token, current + count)
        self.total_token_count += count

    def items(self) -> Iterator[tuple[str, int]]:
        """Yield (token, count) pairs in table order."""
        for token in self.counts:
            yield token, self.counts[token]

    def process(
        self,
        source: Iterable[str],
        tokenizer: str | Tokenizer,
        ngram_width: int = 0,
        config: TokenizerConfig | None = None,
    ) -> int:
        """
        Train this table on a mailbox-style source.

        Every accepted token is counted. Messages are counted once per
        "From " postmark; a source without any postmark that still produced
        tokens counts as a single message.

        If reading the source fails part way, the tokens and messages seen
        up to that point stay counted and the error propagates.

        Args:
            source: Lines of the mailbox or message, newlines stripped.
            tokenizer: Tokenizer instance, or a registry name.
            ngram_width: N-gram width when tokenizer is a name.
            config: Extra tokenizer settings when tokenizer is a name.

        Returns:
            Number of messages added to message_count.

        Raises:
            InvalidConfigError: If the tokenizer cannot be built. Raised
                                before anything is counted.
        """
        if isinstance(tokenizer, str):
            tokenizer = create_tokenizer(
                tokenizer, replace(config or TokenizerConfig(), ngram_width=ngram_width)
            )

        scanner = TokenScanner(tokenizer, multi_message=True)
        tokens_seen = 0
        try:
            for token in scanner.scan(source):
                self.add_token(token)
                tokens_seen += 1
        finally:
            messages = scanner.message_count
            if messages == 0 and tokens_seen > 0:
                messages = 1
            self.message_count += messages

        logger.debug(
            f"{self.label.value}: +{messages} message(s), +{tokens_seen} token(s)"
        )
        return messages

    def __repr__(self) -> str:
        return (
            f"TokenTable(label={self.label.value}, messages={self.message_count}, "
            f"tokens={self.total_token_count}, unique={self.unique_token_count})"
        )


class Corpus:
    """
    A trained model: normal and spam token tables plus their tokenizer.

    Both tables are always built with the same tokenizer and n-gram width.
    The first training run fixes that configuration; later runs that ask
    for a different one get a warning and the stored one is used.

    Usage:
        >>> corpus = Corpus()
        >>> with LineSource.open("ham.mbox") as source:
        ...     corpus.train(CorpusLabel.NORMAL, source, "whitespace")
        >>> corpus.normal.message_count
        42

    Attributes:
        normal: Token table for normal mail.
        spam: Token table for spam.
        tokenizer: Registry name of the tokenizer, None until first trained.
        tokenizer_config: Settings the tokenizer was built with.
    """

    def __init__(
        self,
        tokenizer: str | None = None,
        tokenizer_config: TokenizerConfig | None = None,
    ) -> None:
        self.normal = TokenTable(CorpusLabel.NORMAL)
        self.spam = TokenTable(CorpusLabel.SPAM)
        self.tokenizer = resolve_tokenizer_name(tokenizer) if tokenizer else None
        self.tokenizer_config = tokenizer_config or TokenizerConfig()

    @property
    def ngram_width(self) -> int:
        """N-gram width shared by both tables."""
        return self.tokenizer_config.ngram_width

    @property
    def total_messages(self) -> int:
        """Messages across both tables."""
        return self.normal.message_count + self.spam.message_count

    def table(self, label: CorpusLabel) -> TokenTable:
        """Token table for a label."""
        return self.normal if label is CorpusLabel.NORMAL else self.spam

    def configure(self, tokenizer: str, config: TokenizerConfig | None = None) -> None:
        """
        Settle which tokenizer this corpus uses.

        An untrained corpus adopts the requested tokenizer after checking
        that it can be built. A trained corpus keeps its own; a mismatch is
        logged as a warning. A width of 0 means none was requested.

        Raises:
            InvalidConfigError: Unknown tokenizer name, or an invalid n-gram
                                width for an untrained corpus.
        """
        config = config or TokenizerConfig()
        name = resolve_tokenizer_name(tokenizer)

        if self.tokenizer is None:
            create_tokenizer(name, config)
            self.tokenizer = name
            self.tokenizer_config = config
            return

        if name != self.tokenizer:
            logger.warning(
                f"Tokenizer '{name}' does not match the stored tokenizer "
                f"'{self.tokenizer}'; using the stored one."
            )
        elif config.ngram_width and config.ngram_width != self.ngram_width:
            logger.warning(
                f"N-gram width {config.ngram_width} does not match the stored "
                f"width {self.ngram_width}; using the stored one."
            )

    def create_tokenizer(self) -> Tokenizer:
        """
        Build the tokenizer this corpus was trained with.

        Raises:
            InvalidConfigError: If the corpus has no tokenizer yet.
        """
        if self.tokenizer is None:
            raise InvalidConfigError("This corpus has not been trained yet.")
        return create_tokenizer(self.tokenizer, self.tokenizer_config)

    def train(
        self,
        label: CorpusLabel,
        source: Iterable[str],
        tokenizer: str,
        ngram_width: int = 0,
        config: TokenizerConfig | None = None,
    ) -> int:
        """
        Accumulate a source into one of the tables.

        Args:
            label: Which table to train.
            source: Lines of a mailbox or single message.
            tokenizer: Requested tokenizer name.
            ngram_width: Requested n-gram width.
            config: Other tokenizer settings.

        Returns:
            Number of messages processed.
        """
        self.configure(tokenizer, replace(config or TokenizerConfig(), ngram_width=ngram_width))
        return self.table(label).process(source, self.create_tokenizer())

    def __repr__(self) -> str:
        return (
            f"Corpus(tokenizer={self.tokenizer!r}, ngram_width={self.ngram_width}, "
            f"normal={self.normal!r}, spam={self.spam!r})"
        )
