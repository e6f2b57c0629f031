# =============================================================================
# Model Storage
# =============================================================================
# Persists a trained Corpus to disk and reads it back.
#
# The model is a single JSON document:
#   {
#     "version": 1,
#     "tokenizer": "ngram",
#     "tokenizer_config": {"ngram_width": 3, "keep_punctuation": false, ...},
#     "corpora": {
#       "normal": {"message_count": 12, "total_token_count": 4031,
#                  "tokens": {"hello": 17, ...}},
#       "spam":   {...}
#     }
#   }
#
# Round-trips exactly: per-token counts, message counts, tokenizer name and
# settings. Model files carry a ".stat" suffix.
# =============================================================================

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from mailsieve.spam.table import Corpus, CorpusLabel, TokenTable
from mailsieve.spam.tokenizer import TokenizerConfig


logger = logging.getLogger(__name__)


# Bump when the document layout changes
MODEL_VERSION = 1

MODEL_SUFFIX = ".stat"


def model_path(path: str | Path) -> Path:
    """
    Normalize a model file name.

    Example:
        >>> model_path("mail")
        PosixPath('mail.stat')
        >>> model_path("mail.stat")
        PosixPath('mail.stat')
    """
    path = Path(path)
    if path.suffix == MODEL_SUFFIX:
        return path
    return path.with_name(path.name + MODEL_SUFFIX)


# =============================================================================
# Encoding
# =============================================================================

def encode(corpus: Corpus) -> bytes:
    """Serialize a corpus to bytes."""
    data = {
        "version": MODEL_VERSION,
        "tokenizer": corpus.tokenizer,
        "tokenizer_config": asdict(corpus.tokenizer_config),
        "corpora": {
            label.value: _table_to_dict(corpus.table(label))
            for label in CorpusLabel
        },
    }
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def decode(payload: bytes) -> Corpus:
    """
    Rebuild a corpus from bytes produced by encode().

    Raises:
        ModelFormatError: If the payload is not a valid model document.
    """
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ModelFormatError(f"Model is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ModelFormatError("Model document must be a JSON object.")

    version = data.get("version")
    if version != MODEL_VERSION:
        raise ModelFormatError(f"Unsupported model version: {version!r}")

    try:
        config = TokenizerConfig(**data.get("tokenizer_config", {}))
        corpus = Corpus(data.get("tokenizer"), config)
        for label in CorpusLabel:
            _fill_table(corpus.table(label), data["corpora"][label.value])
    except ModelFormatError:
        raise
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise ModelFormatError(f"Malformed model document: {e}") from e

    return corpus


def _table_to_dict(table: TokenTable) -> dict[str, Any]:
    return {
        "message_count": table.message_count,
        "total_token_count": table.total_token_count,
        "tokens": dict(table.items()),
    }


def _fill_table(table: TokenTable, data: dict[str, Any]) -> None:
    tokens = data["tokens"]
    for token, count in tokens.items():
        table.counts.put(token, int(count))

    table.message_count = int(data["message_count"])
    table.total_token_count = int(data["total_token_count"])

    if table.total_token_count != sum(tokens.values()):
        raise ModelFormatError(
            f"{table.label.value}: total_token_count does not match the token counts"
        )


# =============================================================================
# Files
# =============================================================================

def save_model(corpus: Corpus, path: str | Path) -> Path:
    """
    Write a corpus to disk.

    Args:
        corpus: Corpus to save.
        path: Model file; ".stat" is appended if missing.

    Returns:
        The path written.
    """
    save_path = model_path(path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    save_path.write_bytes(encode(corpus))
    logger.info(f"Saved model to {save_path}")
    return save_path


def load_model(path: str | Path) -> Corpus:
    """
    Read a corpus from disk.

    Raises:
        MissingModelError: If the model file does not exist.
        ModelFormatError: If the file is not a valid model.
    """
    load_path = model_path(path)
    if not load_path.exists():
        raise MissingModelError(
            f"The model {load_path} does not exist. Train the classifier first."
        )

    logger.info(f"Loading model from {load_path}")
    return decode(load_path.read_bytes())


# =============================================================================
# Exceptions
# =============================================================================

class MissingModelError(FileNotFoundError):
    """Raised when a model is required but no model file exists."""
    pass


class ModelFormatError(ValueError):
    """Raised when a model file cannot be decoded."""
    pass
