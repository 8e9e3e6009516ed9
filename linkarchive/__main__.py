import sys

from linkarchive.cli import main

sys.exit(main())
