import sys

from crumbler.main import main

sys.exit(main())
