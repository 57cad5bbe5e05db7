"""Allow running Shell Container with ``python -m shell_container``."""

from .cli.main import cli

if __name__ == '__main__':
    cli()
