"""ModelTriage CLI — Typer + Rich terminal interface.

Commands: classify, route, score, models, config.
Every command that takes a PROMPT reads stdin when PROMPT is ``-``.
"""

from __future__ import annotations

import json
import sys

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from modeltriage import __version__
from modeltriage.classifier import PromptClassifier
from modeltriage.errors import ConfigurationError
from modeltriage.registry import CONFIG_DIR, load_capability_matrix, load_router_config
from modeltriage.routing import DecisionRouter, ScoringEngine
from modeltriage.schemas.capabilities import CAPABILITY_LABELS, Capability
from modeltriage.schemas.routing import RoutingStrategy

console = Console()

# ── App and sub-apps ─────────────────────────────────────────────

app = typer.Typer(
    name="modeltriage",
    help="Deterministic prompt classification and model routing.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

models_app = typer.Typer(
    name="models",
    help="Inspect the capability matrix.",
    no_args_is_help=True,
)
app.add_typer(models_app, name="models")

config_app = typer.Typer(
    name="config",
    help="Show router configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"modeltriage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """ModelTriage — route prompts to the model best suited to answer them."""


# ── Helpers ──────────────────────────────────────────────────────

def _load_matrix():
    """Load the capability matrix, exit on error."""
    try:
        return load_capability_matrix()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading models:[/red] {e}")
        raise typer.Exit(1) from None


def _load_config():
    """Load router config, exit on error."""
    try:
        return load_router_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from None


def _read_prompt(prompt: str) -> str:
    if prompt == "-":
        return sys.stdin.read()
    return prompt


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, indent=2))


def _confidence_style(confidence: str) -> str:
    """Rich style for a confidence band."""
    return {
        "high": "green",
        "medium": "yellow",
        "low": "red",
    }.get(confidence.lower(), "white")


# ── modeltriage classify ─────────────────────────────────────────

@app.command()
def classify(
    prompt: str = typer.Argument(..., help="Prompt text, or '-' to read stdin"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Classify a prompt without routing it."""
    text = _read_prompt(prompt)
    result = PromptClassifier().classify(text)

    if as_json:
        _echo_json(result.model_dump(mode="json"))
        return

    table = Table(title="Prompt Classification", show_header=False, show_lines=True)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Task Type", result.task_type.value)
    table.add_row("Stakes", result.stakes.value)
    table.add_row("Recency Required", str(result.recency_requirement))
    table.add_row(
        "Classifier Confidence",
        f"[{_confidence_style(result.classifier_confidence.value)}]"
        f"{result.classifier_confidence.value}[/]",
    )

    signals = [
        name for name, fired in result.input_signals.model_dump().items() if fired
    ]
    table.add_row("Input Signals", ", ".join(signals) if signals else "none")

    console.print(table)
    console.print(f"\n[dim]{len(text)} chars[/dim]")


# ── modeltriage route ────────────────────────────────────────────

@app.command()
def route(
    prompt: str = typer.Argument(..., help="Prompt text, or '-' to read stdin"),
    model: str = typer.Option(
        None, "--model", "-m",
        help="Explicit model id (bypasses classification)",
    ),
    strategy: str = typer.Option(
        None, "--strategy", "-s",
        help="Routing strategy: auto, capability_scored, keyword_priority",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a panel"),
) -> None:
    """Pick a model for a prompt."""
    text = _read_prompt(prompt)
    matrix = _load_matrix()
    config = _load_config()

    if strategy:
        try:
            config = config.model_copy(update={"strategy": RoutingStrategy(strategy)})
        except ValueError:
            console.print(f"[red]Invalid strategy:[/red] '{strategy}'")
            raise typer.Exit(1) from None

    try:
        router = DecisionRouter(matrix, config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from None

    decision = router.route(text, requested_model=model)

    if as_json:
        _echo_json(decision.model_dump(mode="json"))
        return

    style = _confidence_style(decision.confidence.value)
    lines = [
        f"[bold]Model:[/bold] {decision.model}",
        f"[bold]Confidence:[/bold] [{style}]{decision.confidence.value}[/]"
        f" ({decision.confidence_score:.2f})",
        f"[bold]Reason:[/bold] {decision.reason}",
        f"[bold]Strategy:[/bold] "
        f"{decision.strategy.value if decision.strategy else 'override'}",
        f"[bold]Intent:[/bold] {decision.intent.value}",
    ]
    if decision.classification is not None:
        lines.append(f"[bold]Task Type:[/bold] {decision.classification.task_type.value}")
    if decision.scoring is not None:
        lines.append(
            f"[bold]Expected Success:[/bold] {decision.scoring.expected_success}/100"
        )

    console.print(Panel("\n".join(lines), title="Routing Decision", border_style="blue"))


# ── modeltriage score ────────────────────────────────────────────

@app.command()
def score(
    prompt: str = typer.Argument(..., help="Prompt text, or '-' to read stdin"),
    candidate: list[str] = typer.Option(
        None, "--candidate", "-c",
        help="Candidate model id (repeatable; default: configured candidates)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
) -> None:
    """Rank candidate models by expected success."""
    text = _read_prompt(prompt)
    matrix = _load_matrix()

    if candidate:
        ids = list(candidate)
    else:
        ids = _load_config().candidates or list(matrix.models)

    unknown = [m for m in ids if matrix.profile(m) is None]
    if unknown:
        console.print(f"[red]Model not found:[/red] {', '.join(unknown)}")
        console.print(f"[dim]Available: {', '.join(sorted(matrix.models))}[/dim]")
        raise typer.Exit(1) from None

    classification = PromptClassifier().classify(text)
    engine = ScoringEngine(matrix)
    profiles = matrix.profiles_for(ids)
    try:
        ranked = engine.rank(classification, profiles)
        result = engine.recommend(classification, ranked)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from None

    if as_json:
        _echo_json({
            "classification": classification.model_dump(mode="json"),
            "result": result.model_dump(mode="json"),
            "ranking": [
                {"model": s.model_id, "expected_success": s.expected_success}
                for s in ranked
            ],
        })
        return

    table = Table(title=f"Expected Success ({classification.task_type.value})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Model", style="bold cyan")
    table.add_column("Display Name")
    table.add_column("Base", justify="right")
    table.add_column("Expected", justify="right", style="bold green")

    for i, s in enumerate(ranked, start=1):
        table.add_row(
            str(i),
            s.model_id,
            s.profile.display_name,
            f"{s.base_score:.1f}",
            str(s.expected_success),
        )
    console.print(table)

    factors = Table(title="Key Factors")
    factors.add_column("Capability", style="bold")
    factors.add_column("Score", justify="right")
    factors.add_column("Reason")
    for f in result.key_factors:
        factors.add_row(f.label, str(f.score), f.short_reason)
    console.print()
    console.print(factors)

    style = _confidence_style(result.confidence.value)
    console.print(
        f"\n[bold]Recommended:[/bold] {result.recommended_model_id} "
        f"([{style}]{result.confidence.value}[/] confidence)"
    )
    console.print(f"[dim]{result.short_why}[/dim]")


# ── modeltriage models ───────────────────────────────────────────

@models_app.command("list")
def models_list() -> None:
    """Show all profiled models as a table."""
    matrix = _load_matrix()

    table = Table(title="Capability Matrix", show_lines=True)
    table.add_column("Model", style="bold cyan")
    table.add_column("Display Name")
    table.add_column("Provider", style="dim")
    for capability in Capability:
        table.add_column(CAPABILITY_LABELS[capability], justify="right")

    for model_id, profile in sorted(matrix.models.items()):
        table.add_row(
            model_id,
            profile.display_name,
            profile.provider,
            *(f"{profile.capabilities.get(c):.2f}" for c in Capability),
        )

    console.print(table)
    console.print(f"\n[dim]{len(matrix.models)} models profiled[/dim]")


@models_app.command("show")
def models_show(
    model_id: str = typer.Argument(..., help="Model id"),
) -> None:
    """Show full details for one model."""
    matrix = _load_matrix()

    profile = matrix.profile(model_id)
    if profile is None:
        console.print(f"[red]Model not found:[/red] '{model_id}'")
        console.print(f"[dim]Available: {', '.join(sorted(matrix.models))}[/dim]")
        raise typer.Exit(1) from None

    table = Table(title=f"Model: {model_id}", show_header=False, show_lines=True)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Display Name", profile.display_name)
    table.add_row("Provider", profile.provider)
    for capability in Capability:
        table.add_row(
            CAPABILITY_LABELS[capability],
            f"{profile.capabilities.get(capability):.2f}",
        )

    console.print(table)


# ── modeltriage config ───────────────────────────────────────────

@config_app.command("show")
def config_show() -> None:
    """Show current router configuration."""
    config = _load_config()
    matrix = _load_matrix()

    table = Table(title="Router Configuration", show_header=False, show_lines=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("Strategy", config.strategy.value)
    try:
        effective = DecisionRouter(matrix, config).strategy.value
    except ConfigurationError as e:
        effective = f"[red]invalid: {e}[/red]"
    table.add_row("Effective Strategy", effective)
    table.add_row(
        "Candidates",
        ", ".join(config.candidates) if config.candidates else "(all profiled models)",
    )
    table.add_row("Cache Size", str(config.cache_size) if config.cache_size else "disabled")
    table.add_row("Cache TTL", f"{config.cache_ttl:g}s")

    console.print(table)

    tier_table = Table(title="Keyword Tiers")
    tier_table.add_column("Tier", style="cyan")
    tier_table.add_column("Model")
    tier_table.add_column("Profiled")
    for tier, model_id in config.tiers.model_dump().items():
        profiled = matrix.profile(model_id) is not None
        tier_table.add_row(
            tier,
            model_id,
            "[green]yes[/green]" if profiled else "[yellow]no[/yellow]",
        )
    console.print()
    console.print(tier_table)


@config_app.command("path")
def config_path() -> None:
    """Show configuration file locations."""
    files = [
        ("Models", CONFIG_DIR / "models.toml"),
        ("Defaults", CONFIG_DIR / "defaults.toml"),
    ]

    table = Table(title="Configuration Paths", show_header=False)
    table.add_column("Config", style="bold")
    table.add_column("Path")
    table.add_column("Status")

    for name, path in files:
        exists = path.exists()
        status = "[green]found[/green]" if exists else "[red]missing[/red]"
        table.add_row(name, str(path), status)

    console.print(table)
