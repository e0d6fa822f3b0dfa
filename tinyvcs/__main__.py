import sys

from tinyvcs.main import main

sys.exit(main())
