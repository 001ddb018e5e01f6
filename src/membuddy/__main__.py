import sys

from membuddy.cli import main

sys.exit(main())
