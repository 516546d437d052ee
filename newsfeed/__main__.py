import sys

from newsfeed.cli import main

sys.exit(main())
