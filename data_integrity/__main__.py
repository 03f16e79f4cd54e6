import sys

from data_integrity.main import main

sys.exit(main())
