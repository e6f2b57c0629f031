# =============================================================================
# Storage Module
# =============================================================================
# Everything that touches the filesystem:
#   - textfile: line-by-line readers and writers for mailboxes and reports
#   - model: saving and loading trained models
# =============================================================================

from mailsieve.storage.model import (
    MissingModelError,
    ModelFormatError,
    decode,
    encode,
    load_model,
    model_path,
    save_model,
)
from mailsieve.storage.textfile import LineSink, LineSource, SinkIOError, SourceIOError

__all__ = [
    "LineSource",
    "LineSink",
    "SourceIOError",
    "SinkIOError",
    "encode",
    "decode",
    "save_model",
    "load_model",
    "model_path",
    "MissingModelError",
    "ModelFormatError",
]
