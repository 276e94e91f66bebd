# =============================================================================
# gigtrail/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables `python -m gigtrail.cli lookup ...`; delegates to lookup.main().
# =============================================================================

"""Allow ``python -m gigtrail.cli`` execution."""

import sys

from gigtrail.cli.lookup import main

sys.exit(main())
