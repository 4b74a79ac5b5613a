"""Allow ``python -m llm_stream``."""

import sys

from .cli import main

sys.exit(main())
