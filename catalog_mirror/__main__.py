import sys

from catalog_mirror.main import main

sys.exit(main())
