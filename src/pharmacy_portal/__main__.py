"""Entry point for running pharmacy_portal as a module.

This allows the package to be executed as:
    python -m pharmacy_portal
"""

from pharmacy_portal.cli.main import cli

if __name__ == "__main__":
    cli()
