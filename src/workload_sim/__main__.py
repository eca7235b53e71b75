"""Allow ``python -m workload_sim``."""

from .cli import cli

if __name__ == "__main__":
    cli()
