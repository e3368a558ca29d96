import sys

from logrouter.host.program import main

sys.exit(main())
