import sys

from lampcap.cli import main

sys.exit(main())
