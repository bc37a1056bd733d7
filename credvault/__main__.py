import sys

from credvault.main import main

sys.exit(main())
