# =============================================================================
# mailsieve Entry Point for `python -m mailsieve`
# =============================================================================
# Equivalent to running the 'mailsieve' command after installation.
# =============================================================================

import sys

from mailsieve.app import main

if __name__ == "__main__":
    sys.exit(main())
