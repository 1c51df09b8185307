import sys

from lc3_tracer.cli import main

sys.exit(main())
