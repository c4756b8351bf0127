"""CLI interface for PromptWatt.

Quick start:
    promptwatt compare "What is 2+2?"          # Side-by-side model comparison
    promptwatt route "Explain TCP slow start"  # Classify and pick a model
    promptwatt route "..." --low-energy --execute
    promptwatt providers                       # Registry with energy profiles
    promptwatt web                             # Run the web API
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from promptwatt import __version__
from promptwatt.compare import CompareOrchestrator
from promptwatt.config import ConfigurationError, configure_logging, get_settings
from promptwatt.impact import footprint_for
from promptwatt.providers import COMPARISON_PROVIDERS, PROVIDER_REGISTRY, ProviderClient, ProviderId
from promptwatt.routing import (
    ClassificationError,
    ComplexityClassifier,
    ExecutionError,
    RouteExecutor,
    RoutingPreference,
    select_route,
)

app = typer.Typer(
    name="promptwatt",
    help="Compare LLM latency, tokens and footprint; route prompts by complexity",
    no_args_is_help=True,
)

console = Console()


def _fmt_optional(value: float | None, fmt: str, unit: str) -> str:
    if value is None:
        return "[dim]No data[/dim]"
    return f"{value:{fmt}} {unit}"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Compare LLM responses and their footprint, or route a prompt by complexity."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Check ~/.promptwatt/config.yaml and your PROMPTWATT_* variables.")
        raise typer.Exit(1)
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def compare(
    prompt: str = typer.Argument(..., help="Prompt to send to every model"),
    timeout_ms: int = typer.Option(
        None, "--timeout-ms", "-t", help="Per-model timeout in milliseconds"),
) -> None:
    """Send a prompt to every comparison model and rank the results."""
    settings = get_settings()
    try:
        settings.require_api_key()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Set OPENROUTER_API_KEY in your environment.")
        raise typer.Exit(1)

    async def run() -> list:
        async with ProviderClient(settings) as client:
            orchestrator = CompareOrchestrator(client, timeout_ms=timeout_ms)
            return await orchestrator.compare_ranked(prompt, COMPARISON_PROVIDERS)

    with console.status("Querying models..."):
        results = asyncio.run(run())

    table = Table(title="Model Comparison")
    table.add_column("#", justify="right")
    table.add_column("Model", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("In", justify="right")
    table.add_column("Out", justify="right")
    table.add_column("Energy", justify="right")
    table.add_column("CO₂", justify="right")

    for i, result in enumerate(results, 1):
        footprint = footprint_for(result)
        time_cell = (
            f"{result.latency_ms / 1000:.2f}s" if not result.is_error else "[red]failed[/red]"
        )
        table.add_row(
            str(i),
            result.display_name,
            time_cell,
            f"{result.input_tokens:,}",
            f"{result.output_tokens:,}",
            _fmt_optional(footprint.energy_wh, ".4f", "Wh"),
            _fmt_optional(footprint.co2_g, ".4f", "gCO₂e"),
        )
    console.print(table)

    for result in results:
        style = "red" if result.is_error else "cyan"
        console.print(Panel(result.output_text, title=result.display_name, border_style=style))


@app.command()
def route(
    prompt: str = typer.Argument(..., help="Prompt to classify and route"),
    low_latency: bool = typer.Option(False, "--low-latency", help="Prefer faster models"),
    low_cost: bool = typer.Option(False, "--low-cost", help="Prefer cheaper models"),
    low_energy: bool = typer.Option(False, "--low-energy", help="Prefer lower-energy models"),
    execute: bool = typer.Option(
        False, "--execute", "-x", help="Run the prompt on the selected model"),
) -> None:
    """Classify prompt complexity and select a model for it."""
    settings = get_settings()
    preference = RoutingPreference.from_flags(low_latency, low_cost, low_energy)
    classifier = ComplexityClassifier(model=settings.classifier_model)

    try:
        with console.status("Analyzing prompt..."):
            classification = asyncio.run(classifier.classify(prompt))
    except ClassificationError as e:
        console.print(f"[red]Failed to analyze prompt: {e}[/red]")
        raise typer.Exit(1)

    decision = select_route(classification.label, preference)
    spec = PROVIDER_REGISTRY[decision.provider_id]

    console.print(Panel(
        f"[bold]Complexity:[/bold] {classification.label.value}\n"
        f"[bold]Selected:[/bold] [cyan]{spec.display_name}[/cyan] ({decision.provider_id.value})\n\n"
        f"{classification.rationale} {decision.preference_reason}",
        title="Smart Routing",
        border_style="cyan",
    ))

    if not execute:
        return

    if decision.provider_id != ProviderId.GOOGLE_SEARCH:
        try:
            settings.require_api_key()
        except ConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    async def run():
        async with ProviderClient(settings) as client:
            return await RouteExecutor(client).execute(
                prompt, decision.provider_id, classification)

    try:
        with console.status(f"Running on {spec.display_name}..."):
            routed = asyncio.run(run())
    except ExecutionError as e:
        console.print(f"[red]Failed to execute query: {e}[/red]")
        raise typer.Exit(1)

    result = routed.result
    footprint = footprint_for(result)
    console.print(Panel(result.output_text, title=spec.display_name, border_style="green"))
    console.print(
        f"  {result.latency_ms / 1000:.2f}s | {result.input_tokens:,} in / "
        f"{result.output_tokens:,} out | "
        f"{_fmt_optional(footprint.energy_wh, '.4f', 'Wh')}")


@app.command()
def providers() -> None:
    """List known providers and their energy profiles."""
    table = Table(title="Providers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Params", justify="right")
    table.add_column("Wh / 1k tokens", justify="right")
    table.add_column("Description", style="dim")

    for spec in PROVIDER_REGISTRY.values():
        energy = spec.energy_per_k_token_wh
        table.add_row(
            spec.provider_id.value,
            spec.display_name + (" [dim](simulated)[/dim]" if spec.simulated else ""),
            spec.parameters or "-",
            f"{energy:.2f}" if energy is not None else "[dim]No data[/dim]",
            spec.description,
        )
    console.print(table)


@app.command()
def web(
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
) -> None:
    """Run the PromptWatt web API."""
    import uvicorn

    from promptwatt.web.server import create_app

    url = f"http://{host}:{port}"
    console.print(Panel(
        f"[bold cyan]PromptWatt API[/bold cyan]\n\n"
        f"API: {url}/api/\n"
        f"Docs: {url}/docs\n\n"
        "[dim]Press Ctrl+C to stop[/dim]",
        title="Starting Web Server",
        border_style="cyan",
    ))
    uvicorn.run(create_app(), host=host, port=port, log_level="warning")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"PromptWatt v{__version__}")


if __name__ == "__main__":
    app()
