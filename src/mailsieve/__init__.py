# =============================================================================
# mailsieve: A Naive Bayes Spam Filter
# =============================================================================
#
# mailsieve learns what normal mail and spam look like from mbox mailboxes
# and labels new messages as NORMAL or SPAM.
#
# Features:
#   - Whitespace, HTML-aware and character n-gram tokenizers
#   - Header-aware scanning (From:, To:, Subject: and the body)
#   - Incremental training into a single model file
#   - Laplace-smoothed log-probability scoring with per-token diagnostics
#   - XDG Base Directory compliant
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailsieve"

# Main entry point - this is what gets called by the 'mailsieve' command
from mailsieve.app import main

__all__ = ["main", "__version__", "__app_name__"]
