import sys

from payroll_api.cli import main

sys.exit(main())
