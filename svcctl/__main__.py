"""Allow running as ``python -m svcctl``."""

from svcctl.cli.main import main

main()
