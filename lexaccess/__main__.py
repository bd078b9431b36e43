import sys

from lexaccess.cli import main

sys.exit(main())
