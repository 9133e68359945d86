import sys

from mcpstudio.cli import main

sys.exit(main())
