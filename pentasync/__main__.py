import sys

from pentasync.main import main

sys.exit(main())
