import sys

from switch_exporter.main import main

sys.exit(main())
