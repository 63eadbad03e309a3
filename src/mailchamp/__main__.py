import sys

from src.mailchamp.app import main

sys.exit(main())
