import sys

from volcrate.cli.main import main

sys.exit(main())
