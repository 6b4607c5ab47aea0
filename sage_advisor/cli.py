"""
Sage Advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (advise, list rules, demo run).
  5. Report result to stdout.

Install and run::

    pip install -e .
    sage-advisor --help
    sage-advisor validate-config
    sage-advisor advise "How can we improve platform performance quickly?"
    sage-advisor advise --context-file context.json --max 3 --json
    sage-advisor list-rules
    sage-advisor demo --count 5 --seed 42
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import List, Optional

import typer

app = typer.Typer(
    name="sage-advisor",
    help="Sage Advisor — rule-based advisory and decision-support CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from sage_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from sage_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


def _build_engine_or_exit(config):
    """Build the engine, reporting knowledge-file problems as CLI errors."""
    from sage_advisor.advisory.engine import AdvisoryEngine

    try:
        return AdvisoryEngine(config)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Knowledge file invalid: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("advise")
def advise(
    query: Optional[str] = typer.Argument(
        None,
        help="Free-text question, e.g. 'How do we grow revenue safely?'.",
    ),
    context_file: Optional[str] = typer.Option(
        None,
        "--context-file",
        help="JSON file holding a structured advisory context.",
    ),
    max_recommendations: Optional[int] = typer.Option(
        None,
        "--max",
        min=0,
        help="Maximum recommendations to return (default from config).",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        min=0.0,
        max=1.0,
        help="Minimum confidence to keep a recommendation (default from config).",
    ),
    categories: Optional[List[str]] = typer.Option(
        None,
        "--category",
        help="Only keep recommendations in this category (repeatable).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON instead of a table.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Also write the JSON result to this path.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Produce ranked, explained recommendations for one request.

    Pass either a free-text QUERY or --context-file, not both.
    Exits with code 1 if the request has no objective.
    """
    from sage_advisor.advisory.resolver import resolve_context
    from sage_advisor.models.context import AdviseOptions
    from sage_advisor.reporting.export import export_result_json, result_to_dict
    from sage_advisor.reporting.formatters import format_result

    if (query is None) == (context_file is None):
        typer.echo("[ERROR] Provide exactly one of QUERY or --context-file.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    raw_input: object = query
    if context_file is not None:
        path = Path(context_file)
        if not path.exists():
            typer.echo(f"[ERROR] Context file not found: {path}", err=True)
            raise typer.Exit(code=1)
        try:
            raw_input = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            typer.echo(f"[ERROR] Context file is not valid JSON: {exc}", err=True)
            raise typer.Exit(code=1)

    engine = _build_engine_or_exit(config)
    options = AdviseOptions(
        max_recommendations=max_recommendations,
        confidence_threshold=threshold,
        categories=categories or None,
    )

    try:
        context = resolve_context(raw_input)
        result = engine.advise(context, options)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid advisory request: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result_to_dict(result), indent=2, default=str))
    else:
        typer.echo(format_result(result))

    if output:
        written = export_result_json(result, Path(output))
        typer.echo(f"[OK] Result written to {written}")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Max recommendations:  {config.engine.max_recommendations}")
    typer.echo(f"  Confidence threshold: {config.engine.confidence_threshold}")
    typer.echo(f"  History capacity:     {config.history.capacity}")
    typer.echo(f"  Knowledge file:       {config.knowledge.knowledge_file or '(none)'}")
    typer.echo(f"  Built-in rules:       {config.knowledge.load_builtin_rules}")
    typer.echo(f"  Log level:            {config.logging.level}")
    typer.echo(f"  Debug mode:           {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("list-rules")
def list_rules(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List registered domain rules, knowledge entries and decision templates."""
    from sage_advisor.reporting.formatters import format_registry

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = _build_engine_or_exit(config)

    typer.echo(format_registry(engine.registry.snapshot()))


@app.command("demo")
def demo(
    count: int = typer.Option(
        3,
        "--count",
        min=1,
        help="Number of sample contexts to advise on.",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for sample contexts (default from config).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run the engine over generated sample contexts and print a summary.

    The same seed always produces the same contexts and recommendations.
    """
    from sage_advisor.reporting.formatters import format_history
    from sage_advisor.utils.sampling import generate_sample_contexts

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = _build_engine_or_exit(config)

    effective_seed = seed if seed is not None else config.sampling.seed
    contexts = generate_sample_contexts(count, random.Random(effective_seed))

    typer.echo(f"Running {len(contexts)} sample request(s) | seed={effective_seed}")
    for ctx in contexts:
        result = engine.advise(ctx)
        top = result.recommendations[0].title if result.recommendations else "-"
        typer.echo(
            f"  {ctx.domain:<11} {ctx.objective[:40]:<40}  "
            f"recs={len(result.recommendations)}  risk={result.analysis.risk_assessment.level}  "
            f"top={top}"
        )

    typer.echo(format_history(engine.recent_history(count)))

    metrics = engine.metrics()
    typer.echo("")
    typer.echo(
        f"[OK] {metrics.execution_count} run(s), {metrics.error_count} error(s), "
        f"avg {metrics.average_execution_ms:.1f}ms"
    )


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
