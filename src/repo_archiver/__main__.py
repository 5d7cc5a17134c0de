"""Allow `python -m repo_archiver`."""

import sys

from repo_archiver.cli import main

sys.exit(main())
