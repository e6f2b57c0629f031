# =============================================================================
# Text Reports
# =============================================================================
# Diagnostic dumps for trained models and classification results.
#
# Corpus report (train --dump):
#   NORMAL email token dump:
#   Tokenizer used    : whitespace
#   Email processed   : 12
#   Total token count : 4031
#   Unique token count: 977
#
#   Count   Prob (cnt/tot)   Token          <- full report only
#   -----   --------------   -----
#      17     0.0042173158   hello
#
# Classification report (test -l):
#   Tokenizer: whitespace
#
#   Norm Table: Email=12, Tokens=4031, Unique=977, Prior=0.545455
#   Spam Table: Email=10, Tokens=3120, Unique=1204, Prior=0.454545
#
#   X-Spam-Status: NORMAL, N: -812.44, S: -840.19, Diff: 27.75
#
#   Bayes Norm    Bayes Spam      Diff   Count   Token
#   ----------    ----------      ----   -----   -----
#   -7.301020     -8.045893    n   0.7       2   hello
#
#   End.
# =============================================================================

from mailsieve.spam.classifier import Verdict
from mailsieve.spam.table import Corpus, CorpusLabel, TokenTable
from mailsieve.storage.textfile import LineSink


def table_summary(table: TokenTable) -> list[str]:
    """The three summary lines for one token table."""
    return [
        f"Email processed   : {table.message_count}",
        f"Total token count : {table.total_token_count}",
        f"Unique token count: {table.unique_token_count}",
    ]


def table_rows(table: TokenTable) -> list[str]:
    """One row per token: count, relative frequency and the token itself."""
    lines = [
        "Count   Prob (cnt/tot)   Token",
        "-----   --------------   -----",
    ]
    total = table.total_token_count
    for token, count in table.items():
        freq = count / total if total else 0.0
        lines.append(f"{count:>5}   {freq:>14.10f}   {token}")
    return lines


def corpus_report(corpus: Corpus, *, full: bool = False) -> list[str]:
    """
    Report on both tables of a trained model.

    Args:
        corpus: The model to describe.
        full: Include every token row. Without it only the summary
              lines are produced.

    Returns:
        Report lines, without trailing newlines.
    """
    lines: list[str] = []
    for label in CorpusLabel:
        table = corpus.table(label)
        if full:
            lines.append(f"{label.name} email token dump:")
        else:
            lines.append(f"{label.name} email token dump (summary only)...")
        lines.append(f"Tokenizer used    : {_describe_tokenizer(corpus)}")
        lines.extend(table_summary(table))
        if full:
            lines.append("")
            lines.extend(table_rows(table))
        lines.append("")
    return lines


def classification_report(verdict: Verdict, corpus: Corpus) -> list[str]:
    """
    Report on how one message was scored.

    Rows follow the order of the working table. The n/s marker shows which
    class each token leaned towards.
    """
    lines = [f"Tokenizer: {_describe_tokenizer(corpus)}", ""]
    lines.append(_table_header("Norm", corpus.normal, verdict.normal_prior))
    lines.append(_table_header("Spam", corpus.spam, verdict.spam_prior))
    lines.append("")
    lines.append(verdict.status_line)
    lines.append("")
    lines.append("Bayes Norm    Bayes Spam      Diff   Count   Token")
    lines.append("----------    ----------      ----   -----   -----")

    for token in verdict.token_scores:
        score = verdict.token_scores[token]
        marker = "n" if score.leaning is CorpusLabel.NORMAL else "s"
        lines.append(
            f"{score.normal:>10.6f}    {score.spam:>10.6f}    {marker} {score.difference:>5.1f}"
            f"   {score.count:>5}   {token}"
        )

    lines.append("")
    lines.append("End.")
    return lines


def write_corpus_report(corpus: Corpus, sink: LineSink, *, full: bool = False) -> None:
    """Write corpus_report() to a sink."""
    sink.write_lines(corpus_report(corpus, full=full))


def write_classification_report(verdict: Verdict, corpus: Corpus, sink: LineSink) -> None:
    """Write classification_report() to a sink."""
    sink.write_lines(classification_report(verdict, corpus))


def _table_header(name: str, table: TokenTable, prior: float) -> str:
    return (
        f"{name} Table: Email={table.message_count}, "
        f"Tokens={table.total_token_count}, "
        f"Unique={table.unique_token_count}, Prior={prior:.6f}"
    )


def _describe_tokenizer(corpus: Corpus) -> str:
    if corpus.tokenizer is None:
        return "(untrained)"
    if corpus.ngram_width:
        return f"{corpus.tokenizer} (width {corpus.ngram_width})"
    return corpus.tokenizer
