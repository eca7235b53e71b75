"""Command line entry point for the workload simulator."""

from __future__ import annotations

import click
import uvicorn

from .config import Settings, Strategy, get_settings
from .logging import configure_logging, get_logger
from .profiles import CATALOG, get_profile
from .service import create_app
from .simulator import WorkloadSimulator


def _simulator(profile_name: str | None, seed: int | None) -> WorkloadSimulator:
    settings = get_settings()
    if profile_name is None:
        profile = settings.resolve_profile()
    else:
        try:
            profile = get_profile(profile_name)
        except KeyError as exc:
            raise click.BadParameter(str(exc.args[0]), param_hint="--profile") from exc
    return WorkloadSimulator(profile, seed=seed, cpu_check_interval=settings.cpu_check_interval)


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (defaults to WORKLOAD_SIM_LOG_LEVEL).",
)
def cli(log_level: str | None) -> None:
    """Workload simulator for comparing concurrency strategies."""
    configure_logging(log_level, force=True)


@cli.command()
@click.option("--strategy", type=click.Choice([s.value for s in Strategy]), default=None, help="Scheduling strategy.")
@click.option("--profile", default=None, help="Workload profile name.")
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", default=None, type=int, help="Bind port.")
def serve(strategy: str | None, profile: str | None, host: str | None, port: int | None) -> None:
    """Run the HTTP API with uvicorn."""
    overrides = {
        key: value
        for key, value in {"strategy": strategy, "profile": profile, "api_host": host, "api_port": port}.items()
        if value is not None
    }
    settings = Settings(**{**get_settings().model_dump(), **overrides})
    get_logger(__name__).info(
        "api.run",
        host=settings.api_host,
        port=settings.api_port,
        strategy=settings.strategy.value,
    )
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def profiles() -> None:
    """List the workload profile catalog."""
    click.echo(f"{'PROFILE':<16} {'IO ms':>11} {'CPU ms':>11} {'MEMORY bytes':>21}")
    for profile in CATALOG.values():
        click.echo(
            f"{profile.name:<16} "
            f"{f'{profile.io_min_ms:g}-{profile.io_max_ms:g}':>11} "
            f"{f'{profile.cpu_min_ms:g}-{profile.cpu_max_ms:g}':>11} "
            f"{f'{profile.mem_min_bytes}-{profile.mem_max_bytes}':>21}"
        )


@cli.command()
@click.option("--profile", default=None, help="Workload profile name.")
@click.option("--count", default=1, type=click.IntRange(min=0), help="Number of sequential queries.")
@click.option("--seed", default=None, type=int, help="Seed for deterministic sampling.")
def query(profile: str | None, count: int, seed: int | None) -> None:
    """Run a batch of simulated queries and print the aggregate as JSON."""
    result = _simulator(profile, seed).run_batch(count)
    click.echo(result.model_dump_json(indent=2))


@cli.command()
@click.argument("duration_ms", type=click.IntRange(min=0))
def cpu(duration_ms: int) -> None:
    """Burn CPU for DURATION_MS milliseconds and print the result as JSON."""
    result = _simulator(None, None).run_cpu_burst(duration_ms)
    click.echo(result.model_dump_json(indent=2))


@cli.command()
@click.option("--profile", default=None, help="Workload profile name.")
@click.option("--queries", default=5, type=click.IntRange(min=0), help="Queries in the batch.")
@click.option("--cpu-ms", default=100, type=click.IntRange(min=0), help="Extra CPU burst after the batch.")
def stress(profile: str | None, queries: int, cpu_ms: int) -> None:
    """Run a batch followed by a CPU burst and print the result as JSON."""
    result = _simulator(profile, None).run_stress(queries, cpu_ms)
    click.echo(result.model_dump_json(indent=2))
