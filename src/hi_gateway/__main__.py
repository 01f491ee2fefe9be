"""Entry point for running hi_gateway as a module.

This allows the package to be executed as:
    python -m hi_gateway
"""

from hi_gateway.cli.main import cli

if __name__ == "__main__":
    cli()
