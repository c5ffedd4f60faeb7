from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from mtreex import MTree, SplitPolicy
from mtreex.algo.split import PARTITIONS, PROMOTIONS
from mtreex.scenario import (
    ReplayMismatch,
    generate_scenario,
    load_scenario,
    replay_scenario,
    save_scenario,
)

from .support.benchmark_utils import benchmark_knn_latency


_HELP = """M-tree command line interface.

Subcommands generate scenario fixtures, replay them against a linear scan,
and measure query latency and pruning."""

app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    help=_HELP,
)


def _split_policy(promotion: str, partition: str, seed: Optional[int]) -> SplitPolicy:
    try:
        return SplitPolicy.from_names(promotion, partition, seed=seed)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("generate")
def generate_command(
    output: Path = typer.Argument(..., help="Destination JSON fixture."),
    dimensions: int = typer.Option(2, "--dimensions", min=1, help="Vector dimensionality."),
    count: int = typer.Option(100, "--count", min=0, help="Number of actions."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed."),
    remove_probability: float = typer.Option(
        0.2, "--remove-probability", min=0.0, max=0.99, help="Chance that an action removes an object."
    ),
    span: int = typer.Option(100, "--span", min=1, help="Coordinates are drawn from [0, span)."),
) -> None:
    """Write a random add/remove scenario fixture."""

    try:
        scenario = generate_scenario(
            dimensions, count, seed=seed, remove_probability=remove_probability, span=span
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    save_scenario(scenario, output)
    typer.echo(f"wrote {len(scenario)} actions to {output}")


@app.command("replay")
def replay_command(
    fixture: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario fixture to replay."),
    capacity: int = typer.Option(2, "--capacity", min=2, help="Maximum node capacity."),
    min_capacity: int = typer.Option(-1, "--min-capacity", help="Minimum node capacity (-1 for default)."),
    promotion: str = typer.Option("sorted", "--promotion", help=f"One of {sorted(PROMOTIONS)}."),
    partition: str = typer.Option("balanced", "--partition", help=f"One of {sorted(PARTITIONS)}."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for random promotion."),
    check: bool = typer.Option(True, "--check/--no-check", help="Validate tree invariants after every action."),
) -> None:
    """Replay a fixture and cross-check every query against a linear scan."""

    try:
        scenario = load_scenario(fixture)
        tree = MTree(
            capacity,
            min_capacity,
            split_policy=_split_policy(promotion, partition, seed),
            check_invariants=check,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        report = replay_scenario(tree, scenario)
    except (ReplayMismatch, AssertionError) as exc:
        typer.echo(f"replay failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"replayed {report.actions} actions ({report.additions} adds, {report.removals} removes); "
        f"{report.range_results} range results, {report.limit_results} limit results verified; "
        f"final size {report.final_size}, height {tree.height}, "
        f"{report.distance_computations} tree distance computations"
    )


@app.command("query")
def query_command(
    dimension: int = typer.Option(8, "--dimension", min=1, help="Dimensionality of points."),
    tree_points: int = typer.Option(2048, "--tree-points", min=1, help="Points stored before querying."),
    queries: int = typer.Option(128, "--queries", min=1, help="Number of query points."),
    k: int = typer.Option(8, "--k", min=0, help="Neighbours per limit query."),
    radius: Optional[float] = typer.Option(
        None, "--radius", min=0.0, help="Run range queries with this radius instead of limit queries."
    ),
    capacity: int = typer.Option(16, "--capacity", min=2, help="Maximum node capacity."),
    promotion: str = typer.Option("random", "--promotion", help=f"One of {sorted(PROMOTIONS)}."),
    partition: str = typer.Option("balanced", "--partition", help=f"One of {sorted(PARTITIONS)}."),
    seed: int = typer.Option(0, "--seed", help="Random seed."),
) -> None:
    """Build a tree of Gaussian points and time queries against it."""

    _split_policy(promotion, partition, seed)
    tree, result = benchmark_knn_latency(
        dimension=dimension,
        tree_points=tree_points,
        query_count=queries,
        k=k,
        capacity=capacity,
        seed=seed,
        radius=radius,
        promotion=promotion,
        partition=partition,
    )
    mode = f"range r={radius}" if radius is not None else f"k={k}"
    typer.echo(
        f"tree size={len(tree)} height={tree.height} build={result.build_seconds:.4f}s | "
        f"{mode} queries={result.queries} latency={result.latency_ms:.4f}ms "
        f"throughput={result.queries_per_second:,.1f} q/s | "
        f"distances={result.distance_computations} "
        f"(linear scan {result.linear_scan_computations}, pruned {result.pruning_ratio:.1%})"
    )


def main() -> None:
    app()


__all__ = ["app", "main"]
