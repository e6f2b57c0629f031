# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailsieve test suite.
# =============================================================================

import pytest
import tempfile
from pathlib import Path

from mailsieve.spam import Corpus, CorpusLabel
from mailsieve.storage import LineSource


NORMAL_MBOX = """\
From alice@example.com Mon Jan 15 09:00:00 2024
From: alice@example.com
To: bob@example.com
Subject: meeting agenda
X-Mailer: Thunderbird

Here is the agenda for the meeting tomorrow
Please review the notes

From carol@example.com Tue Jan 16 09:00:00 2024
From: carol@example.com
Subject: lunch tomorrow

Are we still on for lunch tomorrow
"""

SPAM_MBOX = """\
From promo@prizes.example Mon Jan 15 10:00:00 2024
From: promo@prizes.example
To: bob@example.com
Subject: You won cash
X-Mailer: BulkBlaster

Claim your cash prize now
Click here to claim your free cash

From deals@pills.example Tue Jan 16 10:00:00 2024
From: deals@pills.example
Subject: cheap pills

Cheap pills and free cash now
"""


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.config and ~/.local/share."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def normal_mbox():
    """Two ordinary messages in mbox format."""
    return NORMAL_MBOX


@pytest.fixture
def spam_mbox():
    """Two spam messages in mbox format."""
    return SPAM_MBOX


@pytest.fixture
def spam_message():
    """A single spam message, no postmark."""
    return """\
From: promo@prizes.example
Subject: free cash

Claim your free cash prize now
"""


@pytest.fixture
def normal_message():
    """A single ordinary message, no postmark."""
    return """\
From: dave@example.com
Subject: meeting tomorrow

Please review the agenda
"""


@pytest.fixture
def mailbox_files(temp_dir, normal_mbox, spam_mbox, spam_message, normal_message):
    """The sample mailboxes and messages written to disk."""
    files = {
        "normal": temp_dir / "normal.mbox",
        "spam": temp_dir / "spam.mbox",
        "spam_message": temp_dir / "spam.eml",
        "normal_message": temp_dir / "normal.eml",
    }
    files["normal"].write_text(normal_mbox)
    files["spam"].write_text(spam_mbox)
    files["spam_message"].write_text(spam_message)
    files["normal_message"].write_text(normal_message)
    return files


@pytest.fixture
def trained_corpus(normal_mbox, spam_mbox):
    """A corpus trained on both sample mailboxes with the whitespace tokenizer."""
    corpus = Corpus()
    corpus.train(CorpusLabel.NORMAL, LineSource.from_text(normal_mbox), "whitespace")
    corpus.train(CorpusLabel.SPAM, LineSource.from_text(spam_mbox), "whitespace")
    return corpus
