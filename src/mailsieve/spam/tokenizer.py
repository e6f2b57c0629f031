# =============================================================================
# Line Tokenizers for Spam Classification
# =============================================================================
# Turns one line of message text into an ordered stream of tokens.
#
# Every character on the line falls into one of three classes:
#   - Delimiter: ends the current token
#   - Skip:      dropped from the token body, but does not end the token
#   - Content:   appended to the token
#
# Three tokenizers are available, selected by name through TOKENIZERS:
#   - "whitespace": splits at whitespace, optionally drops punctuation
#   - "html":       also splits at characters common inside HTML tags
#   - "ngram":      fixed-width tokens of N characters, no delimiters
#
# A tokenizer is reseeded with reset() for every line; it carries nothing
# from one line to the next. Joining n-gram fragments across lines is the
# caller's job (see mailsieve.spam.scanner).
# =============================================================================

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar


@dataclass
class TokenizerConfig:
    """
    Configuration shared by all tokenizers.

    Attributes:
        keep_punctuation: Keep punctuation inside tokens instead of dropping it.
                          Punctuation is anything that is not a letter, a
                          digit or whitespace.
        keep_whitespace: Keep whitespace inside n-gram tokens (ngram only).
        ngram_width: Token width for the ngram tokenizer (0 = disabled).
    """
    keep_punctuation: bool = False
    keep_whitespace: bool = False
    ngram_width: int = 0


def is_punctuation(ch: str) -> bool:
    """Returns True for any character that is not alphanumeric or whitespace."""
    return not (ch.isalnum() or ch.isspace())


class Tokenizer(ABC):
    """
    Base class for line tokenizers.

    Subclasses decide which characters are delimiters and which are
    skipped; the scanning loop lives here.

    Usage:
        >>> tokenizer = WhitespaceTokenizer()
        >>> list(tokenizer.tokens("hello, world!"))
        ['hello', 'world']

    Attributes:
        name: Registry identifier for this tokenizer.
        config: Tokenizer configuration.
    """

    name: ClassVar[str] = ""

    def __init__(self, config: TokenizerConfig | None = None) -> None:
        """
        Initialize the tokenizer.

        Args:
            config: Tokenizer configuration. Uses defaults if None.
        """
        self.config = config or TokenizerConfig()
        self._line = ""
        self._pos = 0

    def reset(self, line: str) -> None:
        """Seed the tokenizer with a new line and rewind the cursor."""
        if line is None:
            raise ValueError("Line to tokenize cannot be None.")
        self._line = line
        self._pos = 0

    @property
    def position(self) -> int:
        """Current cursor position in the line."""
        return self._pos

    @property
    def fixed_width(self) -> int:
        """Exact token width, or 0 for delimiter-based tokenizers."""
        return 0

    def tokens(self, line: str) -> Iterator[str]:
        """
        Yield every token on a line.

        Args:
            line: Text to tokenize.

        Yields:
            Tokens in line order. Tokens may be empty strings when a run of
            skip characters is all that is left; callers ignore those.
        """
        self.reset(line)
        while self.has_more_tokens():
            yield self.next_token()

    def has_more_tokens(self) -> bool:
        """Returns True if another token can be read from the line."""
        return self._find_token_start() >= 0

    def next_token(self) -> str:
        """
        Read the next token.

        Raises:
            IndexError: If the line has no more tokens.
        """
        start = self._find_token_start()
        if start < 0:
            raise IndexError("No more tokens on this line.")

        chars: list[str] = []
        self._pos = start
        while self._pos < len(self._line):
            ch = self._line[self._pos]
            self._pos += 1
            if self.is_delimiter(ch):
                break
            if self.is_skipped(ch):
                continue
            chars.append(ch)

        return "".join(chars)

    def _find_token_start(self) -> int:
        """Position of the next content character, or -1 at end of line."""
        for index in range(self._pos, len(self._line)):
            ch = self._line[index]
            if not self.is_delimiter(ch) and not self.is_skipped(ch):
                return index
        return -1

    @abstractmethod
    def is_delimiter(self, ch: str) -> bool:
        """Returns True if ch ends a token."""

    def is_skipped(self, ch: str) -> bool:
        """Returns True if ch is dropped from token bodies."""
        if self.config.keep_punctuation:
            return False
        return is_punctuation(ch)


class WhitespaceTokenizer(Tokenizer):
    """Splits at whitespace; punctuation is dropped unless kept."""

    name = "whitespace"

    def is_delimiter(self, ch: str) -> bool:
        return ch.isspace()


class HtmlAwareTokenizer(Tokenizer):
    """
    Splits at whitespace and at characters that show up inside HTML tags.

    "<a href=http://spam.example/buy>" yields a, href, http, spam, example,
    buy rather than one long run of markup.
    """

    name = "html"

    # Punctuation that acts as a delimiter instead of being skipped
    HTML_DELIMITERS = frozenset('<>=."/_:?@')

    def is_delimiter(self, ch: str) -> bool:
        return ch.isspace() or ch in self.HTML_DELIMITERS


class NGramTokenizer(Tokenizer):
    """
    Emits tokens of exactly `ngram_width` characters.

    There are no delimiters: skip characters are dropped and everything
    else is collected until the token is full or the line ends. The last
    token on a line may therefore be shorter than the width.

    Letters and digits are never skipped. Whitespace is skipped unless
    keep_whitespace is set, other punctuation unless keep_punctuation is.
    """

    name = "ngram"

    def __init__(self, config: TokenizerConfig | None = None) -> None:
        super().__init__(config)
        if self.config.ngram_width < 1:
            raise InvalidConfigError(
                f"Invalid n-gram width ({self.config.ngram_width}); "
                "the ngram tokenizer needs a width of 1 or more."
            )

    @property
    def fixed_width(self) -> int:
        return self.config.ngram_width

    def has_more_tokens(self) -> bool:
        return self._pos < len(self._line)

    def next_token(self) -> str:
        if not self.has_more_tokens():
            raise IndexError("No more tokens on this line.")

        chars: list[str] = []
        while self._pos < len(self._line) and len(chars) < self.fixed_width:
            ch = self._line[self._pos]
            self._pos += 1
            if self.is_skipped(ch):
                continue
            chars.append(ch)

        return "".join(chars)

    def is_delimiter(self, ch: str) -> bool:
        return False

    def is_skipped(self, ch: str) -> bool:
        if ch.isalnum():
            return False
        if ch.isspace():
            return not self.config.keep_whitespace
        return not self.config.keep_punctuation


# =============================================================================
# Registry
# =============================================================================

TOKENIZERS: dict[str, type[Tokenizer]] = {
    WhitespaceTokenizer.name: WhitespaceTokenizer,
    HtmlAwareTokenizer.name: HtmlAwareTokenizer,
    NGramTokenizer.name: NGramTokenizer,
}


def resolve_tokenizer_name(name: str) -> str:
    """
    Map a tokenizer identifier to its registry name.

    Registry names and class names are accepted, case-insensitively:
    "ngram", "NGram" and "NGramTokenizer" all resolve to "ngram".

    Raises:
        InvalidConfigError: If no tokenizer matches.
    """
    if not name:
        raise InvalidConfigError("A tokenizer was not specified.")

    wanted = name.strip().lower()
    for registry_name, tokenizer_class in TOKENIZERS.items():
        if wanted in (registry_name, tokenizer_class.__name__.lower()):
            return registry_name

    known = ", ".join(sorted(TOKENIZERS))
    raise InvalidConfigError(f"Unknown tokenizer '{name}' (choose from: {known})")


def create_tokenizer(name: str, config: TokenizerConfig | None = None) -> Tokenizer:
    """
    Build a tokenizer by name.

    Args:
        name: Tokenizer identifier (see resolve_tokenizer_name).
        config: Tokenizer configuration.

    Returns:
        A fresh tokenizer instance.

    Raises:
        InvalidConfigError: For unknown names or an invalid n-gram width.
    """
    return TOKENIZERS[resolve_tokenizer_name(name)](config)


# =============================================================================
# Exceptions
# =============================================================================

class InvalidConfigError(ValueError):
    """Raised for an unknown tokenizer or an invalid n-gram width."""
    pass
