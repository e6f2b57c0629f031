# =============================================================================
# Tests for header filtering, message boundaries and n-gram wraparound
# =============================================================================

from mailsieve.spam.scanner import LineClassifier, LineState, TokenScanner, split_first_word
from mailsieve.spam.tokenizer import NGramTokenizer, TokenizerConfig, WhitespaceTokenizer


def test_split_first_word():
    assert split_first_word("Subject: cheap meds") == ("Subject:", "cheap meds")
    assert split_first_word("From") == ("From", "")


# =============================================================================
# LineClassifier
# =============================================================================

def test_single_message_header_filtering():
    lines = LineClassifier(multi_message=False)
    assert lines.feed("From: alice@example.com") == "alice@example.com"
    assert lines.feed("X-Mailer: Thunderbird") is None
    assert lines.feed("Subject: hello there") == "hello there"
    assert lines.feed("To: bob@example.com") == "bob@example.com"
    assert lines.feed("") is None
    assert lines.state is LineState.IN_BODY
    assert lines.feed("X-Mailer: not a header any more") == "X-Mailer: not a header any more"


def test_single_message_ignores_postmarks():
    lines = LineClassifier(multi_message=False)
    lines.feed("Subject: memo")
    lines.feed("")
    assert lines.feed("From the desk of the CEO") == "From the desk of the CEO"
    assert lines.message_count == 0


def test_mailbox_counts_postmarks():
    lines = LineClassifier()
    assert lines.state is LineState.EXPECT_POSTMARK

    assert lines.feed("From alice@example.com Mon Jan 15 09:00:00 2024") is None
    assert lines.message_count == 1
    assert lines.state is LineState.IN_HEADER

    lines.feed("Subject: one")
    lines.feed("")
    assert lines.state is LineState.EXPECT_POSTMARK

    lines.feed("From carol@example.com Tue Jan 16 09:00:00 2024")
    assert lines.message_count == 2


def test_mailbox_body_continues_after_blank_line():
    lines = LineClassifier()
    lines.feed("From alice@example.com Mon Jan 15 09:00:00 2024")
    lines.feed("")
    assert lines.feed("first paragraph") == "first paragraph"
    lines.feed("")
    assert lines.feed("Subject: looks like a header") == "Subject: looks like a header"
    assert lines.message_count == 1


def test_mailbox_without_postmark_starts_in_header():
    lines = LineClassifier()
    assert lines.feed("Subject: no envelope") == "no envelope"
    assert lines.feed("X-Spam: ignored") is None
    assert lines.message_count == 0


# =============================================================================
# TokenScanner
# =============================================================================

def test_ngram_fragment_wraps_to_next_line():
    scanner = TokenScanner(NGramTokenizer(TokenizerConfig(ngram_width=3)), multi_message=False)

    assert list(scanner.scan(["", "abcde", "fgh"])) == ["abc", "def"]
    assert scanner.pending_fragment == "gh"


def test_ngram_fragment_skips_dropped_lines():
    scanner = TokenScanner(NGramTokenizer(TokenizerConfig(ngram_width=3)), multi_message=False)

    tokens = list(scanner.scan(["Subject: abcd", "X-Mailer: zzz", "", "ef"]))

    assert tokens == ["abc", "def"]
    assert scanner.pending_fragment == ""


def test_whitespace_scanner_over_mailbox(spam_mbox):
    scanner = TokenScanner(WhitespaceTokenizer())

    tokens = list(scanner.scan(spam_mbox.splitlines()))

    assert scanner.message_count == 2
    assert tokens[:5] == ["promoprizesexample", "bobexamplecom", "You", "won", "cash"]
    assert "BulkBlaster" not in tokens
    assert tokens.count("cash") == 4
    assert len(tokens) == 26
