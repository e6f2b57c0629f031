# =============================================================================
# mailsieve Command Line
# =============================================================================
# Entry point for the `mailsieve` command.
#
# Commands:
#   train   Accumulate a mailbox into the normal or spam corpus of a model,
#           or dump a model's statistics (--dump)
#   test    Classify one message against a trained model
#   paths   Show where configuration and models are stored
#   config  Write a starter config file
#
# Settings come from the config file first; command-line flags override
# them. Library code raises; this module is the only place errors become
# messages and exit codes.
# =============================================================================

import argparse
import logging
import sys
from pathlib import Path

from mailsieve import __app_name__, __version__
from mailsieve.config import Config, ConfigError, print_paths
from mailsieve.rendering import write_classification_report, write_corpus_report
from mailsieve.spam import (
    Corpus,
    CorpusLabel,
    DivisionByZeroError,
    InvalidConfigError,
    SpamClassifier,
    TokenizerConfig,
    create_tokenizer,
)
from mailsieve.spam.tokenizer import resolve_tokenizer_name
from mailsieve.storage import (
    LineSink,
    LineSource,
    MissingModelError,
    ModelFormatError,
    load_model,
    save_model,
)


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"

# Errors reported as "ERROR: ..." with exit code 1
EXPECTED_ERRORS = (
    ConfigError,
    InvalidConfigError,
    MissingModelError,
    ModelFormatError,
    DivisionByZeroError,
    OSError,
)


def setup_logging(level: str) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as "INFO" or "DEBUG".
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser.

    Returns:
        The configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="mailsieve: a naive Bayes spam filter for mbox mailboxes",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    # -------------------------------------------------------------------------
    # train
    # -------------------------------------------------------------------------
    train = commands.add_parser(
        "train",
        help="Train a model on a mailbox, or dump its statistics",
        description="Accumulate a mailbox into the normal or spam corpus of a model.",
    )
    train.add_argument("--normal", action="store_true", help="Train the normal corpus")
    train.add_argument("--spam", action="store_true", help="Train the spam corpus")
    train.add_argument("--dump", action="store_true", help="Dump model statistics")
    _add_tokenizer_arguments(train)
    _add_io_arguments(train)

    # -------------------------------------------------------------------------
    # test
    # -------------------------------------------------------------------------
    test = commands.add_parser(
        "test",
        help="Classify one message",
        description="Classify one message as NORMAL or SPAM.",
    )
    _add_tokenizer_arguments(test)
    _add_io_arguments(test)

    # -------------------------------------------------------------------------
    # paths / config
    # -------------------------------------------------------------------------
    commands.add_parser("paths", help="Print configuration paths and exit")

    config = commands.add_parser("config", help="Write a starter config file")
    config.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )

    return parser


def _add_tokenizer_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-k", "--tokenizer",
        help="Tokenizer: whitespace, html or ngram",
    )
    parser.add_argument(
        "-g", "--ngram",
        type=int,
        help="N-gram width for the ngram tokenizer",
    )


def _add_io_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--model",
        type=Path,
        help="Model file (\".stat\" is appended if missing)",
    )
    parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Mailbox or message to read (default: standard input)",
    )
    parser.add_argument(
        "-l", "--log",
        type=Path,
        help="Write a full diagnostic dump to this file",
    )


# =============================================================================
# Commands
# =============================================================================

def cmd_train(args: argparse.Namespace, config: Config) -> int:
    """Train one corpus of a model, or dump it."""
    modes = [flag for flag in ("normal", "spam", "dump") if getattr(args, flag)]
    if len(modes) != 1:
        raise ConfigError("Specify exactly one of --normal, --spam or --dump.")

    model = _resolve_model(args, config)

    if args.dump:
        corpus = load_model(model)
        if args.log:
            print(f"Dumping model statistics to {args.log}, standby...")
            with LineSink.open(args.log) as sink:
                write_corpus_report(corpus, sink, full=True)
        else:
            with LineSink.open() as sink:
                write_corpus_report(corpus, sink)
        return 0

    label = CorpusLabel.NORMAL if args.normal else CorpusLabel.SPAM
    name, tokenizer_config = _resolve_tokenizer(args, config)

    try:
        corpus = load_model(model)
    except MissingModelError:
        logger.info(f"No model at {model}; starting a new one")
        corpus = Corpus()

    # A trained model keeps its own settings; a new one must be buildable
    # before the source is opened
    if corpus.tokenizer is None:
        create_tokenizer(name, tokenizer_config)

    with LineSource.open(args.file) as source:
        messages = corpus.train(
            label, source, name, tokenizer_config.ngram_width, tokenizer_config
        )

    if messages == 0:
        logger.warning(f"No messages found in {source.name}; model not saved.")
        return 0

    saved = save_model(corpus, model)
    table = corpus.table(label)
    print(
        f"Trained {messages} {label.value} message(s) into {saved} "
        f"({table.message_count} message(s), {table.total_token_count} token(s) total)"
    )
    return 0


def cmd_test(args: argparse.Namespace, config: Config) -> int:
    """Classify one message and print its status line."""
    model = _resolve_model(args, config)
    name, tokenizer_config = _resolve_tokenizer(args, config)

    corpus = load_model(model)
    corpus.configure(name, tokenizer_config)

    with LineSource.open(args.file) as source:
        verdict = SpamClassifier(corpus).classify(source)

    print(verdict.status_line)

    if args.log:
        with LineSink.open(args.log) as sink:
            write_classification_report(verdict, corpus, sink)
        logger.info(f"Wrote classification report to {args.log}")

    return 0


def cmd_paths(args: argparse.Namespace, config: Config) -> int:
    """Print configuration paths."""
    print_paths()
    return 0


def cmd_config(args: argparse.Namespace, config: Config) -> int:
    """Write a starter config file."""
    path = args.config or Config.config_file_path()
    if path.exists() and not args.force:
        raise ConfigError(f"{path} already exists; use --force to overwrite it.")

    Config.starter().save(path)
    print(f"Wrote {path}")
    return 0


COMMANDS = {
    "train": cmd_train,
    "test": cmd_test,
    "paths": cmd_paths,
    "config": cmd_config,
}


def _resolve_model(args: argparse.Namespace, config: Config) -> Path:
    model = args.model or config.model_path
    if model is None:
        raise ConfigError("A statistical model file was not specified.")
    return model


def _resolve_tokenizer(args: argparse.Namespace, config: Config) -> tuple[str, TokenizerConfig]:
    """
    Combine -k/-g with the config file.

    Only the name is checked here. The n-gram width matters only for a
    model that has not been trained yet; a trained one keeps its own.

    Raises:
        InvalidConfigError: No tokenizer given, or an unknown name.
    """
    name = args.tokenizer or config.tokenizer.name
    ngram_width = args.ngram if args.ngram is not None else config.tokenizer.ngram_width
    tokenizer_config = TokenizerConfig(
        keep_punctuation=config.tokenizer.keep_punctuation,
        keep_whitespace=config.tokenizer.keep_whitespace,
        ngram_width=ngram_width,
    )

    return resolve_tokenizer_name(name), tokenizer_config


# =============================================================================
# CLI Entry Point
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailsieve.

    This function:
        1. Parses command-line arguments
        2. Loads configuration
        3. Configures logging
        4. Runs the selected command

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        Exit code (0 for success, 1 for errors). Usage errors exit with 2
        from argparse.
    """
    args = build_parser().parse_args(argv)

    try:
        # A broken config file must not stop `config --force` from replacing it
        config = Config() if args.command == "config" else Config.load(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    setup_logging("DEBUG" if args.debug else config.logging.level)

    try:
        return COMMANDS[args.command](args, config)
    except EXPECTED_ERRORS as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
