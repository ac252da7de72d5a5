"""Allow ``python -m site_mirror``."""
from site_mirror.cli import cli

if __name__ == "__main__":
    cli()
