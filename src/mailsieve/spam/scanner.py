# =============================================================================
# Message Scanner
# =============================================================================
# Walks the lines of a message source and produces the token stream that
# both training and classification consume.
#
# Two pieces:
#   - LineClassifier: a small state machine that separates envelope headers
#     from body text and spots message boundaries ("From " postmarks) in
#     mailbox-style sources.
#   - TokenScanner: feeds the lines the classifier accepts to a tokenizer,
#     and joins n-gram fragments that were cut off at the end of a line.
#
# Only three header fields carry signal: From:, To: and Subject:. Their
# field name is stripped and the remainder is tokenized; every other header
# line is dropped.
# =============================================================================

import logging
from collections.abc import Iterable, Iterator
from enum import Enum, auto

from mailsieve.spam.tokenizer import Tokenizer


logger = logging.getLogger(__name__)


# First word of the separator line that starts each message in an mbox
POSTMARK = "From"

# Header fields whose bodies are tokenized
HEADER_FIELDS = frozenset({"From:", "To:", "Subject:"})


class LineState(Enum):
    """Where the classifier is within a message."""
    EXPECT_POSTMARK = auto()    # Next line may start a new message
    IN_HEADER = auto()          # Reading header fields
    IN_BODY = auto()            # Reading body text


def split_first_word(line: str) -> tuple[str, str]:
    """
    Split a line at its first space.

    Returns:
        (first_word, remainder). The remainder is empty if there is no space.

    Example:
        >>> split_first_word("Subject: cheap meds")
        ('Subject:', 'cheap meds')
    """
    word, _, remainder = line.partition(" ")
    return word, remainder


class LineClassifier:
    """
    Decides which lines of a source are tokenized.

    In mailbox mode every "From " postmark starts a new message and bumps
    message_count. A postmark is only looked for at the start of the source
    and after a blank line. A line that turns out not to be a postmark is
    handled by whatever state armed the check: header at the start of the
    source, body after a blank line.

    In single-message mode the source is one message: reading starts in the
    header and postmarks are never looked for.

    Usage:
        >>> classifier = LineClassifier(multi_message=True)
        >>> classifier.feed("From alice@example.com Mon Jan  5 10:00:00 2004")
        >>> classifier.feed("Subject: hello there")
        'hello there'
        >>> classifier.message_count
        1

    Attributes:
        multi_message: True for mailbox sources.
        state: Current LineState.
        message_count: Postmarks seen so far.
    """

    def __init__(self, *, multi_message: bool = True) -> None:
        self.multi_message = multi_message
        self.message_count = 0
        self.state = LineState.EXPECT_POSTMARK if multi_message else LineState.IN_HEADER
        self._resume_state = LineState.IN_HEADER

    def feed(self, line: str) -> str | None:
        """
        Classify one line.

        Args:
            line: The line, without its trailing newline.

        Returns:
            Text to tokenize, or None if the line is dropped.
        """
        if self.state is LineState.EXPECT_POSTMARK:
            if split_first_word(line)[0] == POSTMARK:
                self.message_count += 1
                self.state = LineState.IN_HEADER
                logger.debug(f"Postmark found, message {self.message_count}")
                return None
            self.state = self._resume_state

        if self.state is LineState.IN_HEADER:
            if not line:
                self._blank_line()
                return None
            field_name, field_body = split_first_word(line)
            if field_name in HEADER_FIELDS:
                return field_body
            return None

        if not line:
            self._blank_line()
            return None
        return line

    def _blank_line(self) -> None:
        """A blank line ends the header and may precede a postmark."""
        self.state = LineState.IN_BODY
        if self.multi_message:
            self._resume_state = LineState.IN_BODY
            self.state = LineState.EXPECT_POSTMARK


class TokenScanner:
    """
    Turns a stream of lines into a stream of tokens.

    Lines go through a LineClassifier first; the text it accepts is handed
    to the tokenizer. Empty tokens are ignored.

    Fixed-width tokenizers need one extra rule: a token shorter than the
    width means the line ran out mid-token. That fragment is not emitted.
    It is kept and glued onto the front of the next accepted line instead,
    and dropped if no such line comes.

    Usage:
        >>> scanner = TokenScanner(NGramTokenizer(TokenizerConfig(ngram_width=3)),
        ...                        multi_message=False)
        >>> list(scanner.scan(["", "abcde", "fgh"]))
        ['abc', 'def']
        >>> scanner.pending_fragment
        'gh'
    """

    def __init__(self, tokenizer: Tokenizer, *, multi_message: bool = True) -> None:
        """
        Initialize the scanner.

        Args:
            tokenizer: Tokenizer used for every accepted line.
            multi_message: True for mailbox sources (see LineClassifier).
        """
        self.tokenizer = tokenizer
        self.lines = LineClassifier(multi_message=multi_message)
        self._pending = ""

    @property
    def message_count(self) -> int:
        """Postmarks seen so far."""
        return self.lines.message_count

    @property
    def pending_fragment(self) -> str:
        """Partial n-gram waiting for the next line."""
        return self._pending

    def scan(self, lines: Iterable[str]) -> Iterator[str]:
        """Yield the tokens of every line in order."""
        for line in lines:
            yield from self.scan_line(line)

    def scan_line(self, line: str) -> list[str]:
        """
        Tokenize one line.

        Returns:
            Accepted tokens for this line (possibly empty).
        """
        text = self.lines.feed(line)
        if text is None:
            return []

        if self._pending:
            text = self._pending + text
            self._pending = ""

        width = self.tokenizer.fixed_width
        tokens: list[str] = []
        for token in self.tokenizer.tokens(text):
            if not token:
                continue
            if width and len(token) != width:
                self._pending = token
                break
            tokens.append(token)

        return tokens
