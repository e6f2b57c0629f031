# =============================================================================
# Tests for the command line
# =============================================================================

import logging

import pytest

from mailsieve import __version__
from mailsieve.app import main
from mailsieve.config import Config
from mailsieve.storage import load_model


@pytest.fixture(autouse=True)
def drop_cli_log_handlers():
    """Remove the stderr handler main() installs, so it does not outlive capsys."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


@pytest.fixture
def trained_model(temp_dir, mailbox_files):
    """A model file trained on both sample mailboxes."""
    model = temp_dir / "mail"
    assert main(["train", "--normal", "-k", "whitespace", "-m", str(model), "-f", str(mailbox_files["normal"])]) == 0
    assert main(["train", "--spam", "-k", "whitespace", "-m", str(model), "-f", str(mailbox_files["spam"])]) == 0
    return model


# =============================================================================
# train
# =============================================================================

def test_train_writes_model(trained_model):
    corpus = load_model(trained_model)

    assert trained_model.with_name("mail.stat").exists()
    assert corpus.normal.message_count == 2
    assert corpus.spam.message_count == 2


def test_train_reports_progress(temp_dir, mailbox_files, capsys):
    model = temp_dir / "mail"
    assert main(["train", "--spam", "-k", "whitespace", "-m", str(model), "-f", str(mailbox_files["spam"])]) == 0
    assert "Trained 2 spam message(s)" in capsys.readouterr().out


def test_train_accumulates(trained_model, mailbox_files):
    assert main(["train", "--spam", "-k", "whitespace", "-m", str(trained_model), "-f", str(mailbox_files["spam"])]) == 0

    corpus = load_model(trained_model)
    assert corpus.spam.message_count == 4
    assert corpus.spam.lookup("cash") == 8


def test_train_empty_source_saves_nothing(temp_dir):
    empty = temp_dir / "empty.mbox"
    empty.write_text("")
    model = temp_dir / "mail"

    assert main(["train", "--normal", "-k", "whitespace", "-m", str(model), "-f", str(empty)]) == 0
    assert not (temp_dir / "mail.stat").exists()


def test_train_uses_config_defaults(temp_dir, mailbox_files):
    config_path = temp_dir / "config.toml"
    config = Config()
    config.tokenizer.name = "ngram"
    config.tokenizer.ngram_width = 3
    config.model.path = str(temp_dir / "from-config")
    config.save(config_path)

    assert main(["--config", str(config_path), "train", "--spam", "-f", str(mailbox_files["spam"])]) == 0

    corpus = load_model(temp_dir / "from-config")
    assert corpus.tokenizer == "ngram"
    assert corpus.ngram_width == 3


@pytest.mark.parametrize("args", [
    ["train", "--normal", "-m", "model"],                                   # no tokenizer
    ["train", "--normal", "-k", "whitespace"],                              # no model
    ["train", "--normal", "--spam", "-k", "whitespace", "-m", "model"],     # two labels
    ["train", "-k", "whitespace", "-m", "model"],                           # no mode
    ["train", "--normal", "-k", "krusty", "-m", "model"],                   # unknown tokenizer
    ["train", "--normal", "-k", "ngram", "-g", "0", "-m", "model"],         # bad width
])
def test_train_configuration_errors(args, temp_dir, capsys):
    args = [str(temp_dir / arg) if arg == "model" else arg for arg in args]

    assert main(args) == 1

    assert "ERROR:" in capsys.readouterr().err
    assert not (temp_dir / "model.stat").exists()


def test_retrain_ngram_model_without_width(temp_dir, mailbox_files, capsys):
    model = temp_dir / "mail"
    assert main(["train", "--spam", "-k", "ngram", "-g", "3", "-m", str(model), "-f", str(mailbox_files["spam"])]) == 0

    assert main(["train", "--spam", "-k", "ngram", "-m", str(model), "-f", str(mailbox_files["spam"])]) == 0

    corpus = load_model(model)
    assert corpus.ngram_width == 3
    assert corpus.spam.message_count == 4
    assert "ERROR:" not in capsys.readouterr().err


def test_train_missing_input(temp_dir, capsys):
    args = ["train", "--normal", "-k", "whitespace", "-m", str(temp_dir / "mail"), "-f", str(temp_dir / "nope")]
    assert main(args) == 1
    assert "Cannot open" in capsys.readouterr().err


def test_dump_summary(trained_model, capsys):
    capsys.readouterr()
    assert main(["train", "--dump", "-m", str(trained_model)]) == 0

    out = capsys.readouterr().out
    assert "NORMAL email token dump (summary only)..." in out
    assert "Total token count : 26" in out


def test_dump_to_log(trained_model, temp_dir):
    log = temp_dir / "dump.log"
    assert main(["train", "--dump", "-m", str(trained_model), "-l", str(log)]) == 0
    assert "Prob (cnt/tot)" in log.read_text()


def test_dump_missing_model(temp_dir):
    assert main(["train", "--dump", "-m", str(temp_dir / "absent")]) == 1


# =============================================================================
# test
# =============================================================================

def test_classify_spam(trained_model, mailbox_files, capsys):
    capsys.readouterr()
    assert main(["test", "-k", "whitespace", "-m", str(trained_model), "-f", str(mailbox_files["spam_message"])]) == 0
    assert capsys.readouterr().out.startswith("X-Spam-Status: SPAM, N: ")


def test_classify_normal(trained_model, mailbox_files, capsys):
    capsys.readouterr()
    assert main(["test", "-k", "whitespace", "-m", str(trained_model), "-f", str(mailbox_files["normal_message"])]) == 0
    assert capsys.readouterr().out.startswith("X-Spam-Status: NORMAL, N: ")


def test_classify_writes_report(trained_model, mailbox_files, temp_dir):
    log = temp_dir / "test.log"
    args = ["test", "-k", "whitespace", "-m", str(trained_model), "-f", str(mailbox_files["spam_message"]), "-l", str(log)]

    assert main(args) == 0

    text = log.read_text()
    assert text.startswith("Tokenizer: whitespace")
    assert text.rstrip().endswith("End.")


def test_classify_with_other_tokenizer_warns(trained_model, mailbox_files, capsys):
    capsys.readouterr()
    args = ["test", "-k", "html", "-m", str(trained_model), "-f", str(mailbox_files["spam_message"])]

    assert main(args) == 0

    captured = capsys.readouterr()
    assert captured.out.startswith("X-Spam-Status: SPAM")
    assert "does not match" in captured.err


def test_classify_ngram_model_without_width(temp_dir, mailbox_files, capsys):
    model = temp_dir / "mail"
    assert main(["train", "--normal", "-k", "ngram", "-g", "3", "-m", str(model), "-f", str(mailbox_files["normal"])]) == 0
    assert main(["train", "--spam", "-k", "ngram", "-g", "3", "-m", str(model), "-f", str(mailbox_files["spam"])]) == 0
    capsys.readouterr()

    assert main(["test", "-k", "ngram", "-m", str(model), "-f", str(mailbox_files["spam_message"])]) == 0

    captured = capsys.readouterr()
    assert captured.out.startswith("X-Spam-Status: ")
    assert "does not match" not in captured.err


def test_classify_missing_model(temp_dir, mailbox_files, capsys):
    args = ["test", "-k", "whitespace", "-m", str(temp_dir / "absent"), "-f", str(mailbox_files["spam_message"])]
    assert main(args) == 1
    assert "does not exist" in capsys.readouterr().err


def test_classify_requires_tokenizer(trained_model):
    assert main(["test", "-m", str(trained_model)]) == 1


# =============================================================================
# paths / config / usage
# =============================================================================

def test_paths(capsys):
    assert main(["paths"]) == 0
    out = capsys.readouterr().out
    assert "Config file:" in out
    assert str(Config.default_model_path()) in out


def test_config_command(temp_dir):
    path = temp_dir / "config.toml"

    assert main(["--config", str(path), "config"]) == 0
    assert Config.load(path).tokenizer.name == "whitespace"

    assert main(["--config", str(path), "config"]) == 1
    assert main(["--config", str(path), "config", "--force"]) == 0


def test_invalid_config_file(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text("not [ toml")
    assert main(["--config", str(path), "paths"]) == 1


def test_config_section_must_be_a_table(temp_dir, capsys):
    path = temp_dir / "config.toml"
    path.write_text('tokenizer = "ngram"\n')

    assert main(["--config", str(path), "paths"]) == 1
    assert "[tokenizer] must be a table" in capsys.readouterr().err


@pytest.mark.parametrize("args", [[], ["classify"], ["train", "-g", "three"]])
def test_usage_errors(args):
    with pytest.raises(SystemExit) as exc_info:
        main(args)
    assert exc_info.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out
