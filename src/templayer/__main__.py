import sys

from templayer.cli._dispatcher import main

sys.exit(main())
