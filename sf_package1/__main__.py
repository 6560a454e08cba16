"""Allow ``python -m sf_package1``."""

from sf_package1.cli import main

main()
