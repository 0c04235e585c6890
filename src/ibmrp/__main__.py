"""Allow running the CLI with python -m ibmrp."""
import sys

from ibmrp.cli.main import main

sys.exit(main())
