import sys

from cdef_core.cli import main

sys.exit(main())
