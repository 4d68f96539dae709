import sys

from vehiclesim.cli import main

sys.exit(main())
