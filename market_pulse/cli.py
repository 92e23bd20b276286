"""Click CLI entry point for market-pulse."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from market_pulse.config import Config
from market_pulse.countdown import TimerState
from market_pulse.db import Database
from market_pulse.filters import IMPACT_STEP, SENTIMENT_FILTERS, filter_trends
from market_pulse.orchestrator import TrendOrchestrator, ViewState
from market_pulse.trends.fetcher import TrendFetcher
from market_pulse.trends.models import Persona, SocialPlatform, TrendCategory, TrendItem
from market_pulse.utils.logger import setup_logger

console = Console()

SENTIMENT_STYLES = {"Positive": "green", "Mixed": "yellow", "Neutral": "white"}


def _init(config_path: str | None = None) -> tuple[Config, Database, TrendOrchestrator]:
    """Initialize config, database, and orchestrator."""
    config = Config.load(config_path)
    setup_logger(
        level=config.get("logging.level", default="INFO"),
        log_file=str(config.log_file) if config.log_file else None,
        max_size_mb=config.get("logging.max_size_mb", default=5),
        backup_count=config.get("logging.backup_count", default=3),
    )
    db = Database(config.db_path)
    orchestrator = TrendOrchestrator(
        db,
        TrendFetcher(config),
        cooldown_ms=config.cooldown_ms,
        domain=config.domain,
    )
    return config, db, orchestrator


def _validate_impact(ctx, param, value: int) -> int:
    if value % IMPACT_STEP:
        raise click.BadParameter(f"must be a multiple of {IMPACT_STEP}")
    return value


def _lookup(orchestrator: TrendOrchestrator, trend_id: str) -> TrendItem:
    trend = orchestrator.find_trend(trend_id)
    if trend is None:
        console.print(f"[red]Trend {trend_id} not found[/red]")
        raise click.Abort()
    return trend


def _trend_table(orchestrator: TrendOrchestrator, state: ViewState, sentiment: str, min_impact: int) -> Table:
    shown = filter_trends(list(state.trends), sentiment=sentiment, min_impact=min_impact)
    title = "What's Trending?" if state.category == TrendCategory.ALL else state.category.value
    table = Table(
        title=title,
        caption=f"Showing {len(shown)} of {len(state.trends)}",
    )
    table.add_column("ID", style="dim")
    table.add_column("Title", style="white")
    table.add_column("Topic", style="cyan")
    table.add_column("Impact", style="green", justify="right")
    table.add_column("Sentiment")
    table.add_column("", justify="center")

    for t in shown:
        marks = ("★" if orchestrator.saved.contains(t.id) else "") + ("⏱" if orchestrator.read_later.contains(t.id) else "")
        style = SENTIMENT_STYLES.get(t.sentiment.value, "white")
        table.add_row(t.id[:8], t.title[:70], t.category, str(t.impact_score), f"[{style}]{t.sentiment.value}[/{style}]", marks)
    return table


def _status_line(orchestrator: TrendOrchestrator, state: ViewState) -> Text:
    text = Text(orchestrator.subheader_text(), style="dim")
    if state.category.is_local:
        return text
    if state.loading:
        text.append("  (loading)", style="magenta")
    else:
        text.append(f"  Targeted for: {state.persona.value}", style="cyan")
    if orchestrator.show_countdown:
        text.append(f"  Next update in {state.time_remaining}", style="bold magenta")
    else:
        text.append("  Run with --refresh to find fresh trends", style="dim")
    return text


def _render(orchestrator: TrendOrchestrator, state: ViewState, sentiment: str, min_impact: int):
    status = _status_line(orchestrator, state)
    if state.trends:
        return Group(status, _trend_table(orchestrator, state, sentiment, min_impact))
    if state.loading:
        return Group(status, Text(f"Analyzing the market for a {state.persona.value}...", style="cyan"))
    if state.category == TrendCategory.SAVED:
        return Group(status, Text("No saved trends yet. Bookmark interesting trends with `market-pulse save ID`."))
    if state.category == TrendCategory.READ_LATER:
        return Group(status, Text("No trends in reading list. Use `market-pulse later ID` to add one."))
    return Group(status, Text(f"No trends yet for {state.persona.value}. Try `--refresh`."))


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.pass_context
def cli(ctx, config_path: str | None):
    """Market Pulse: AI-curated digital marketing trends."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# =============================================================================
# config
# =============================================================================

@cli.command("config")
@click.pass_context
def config_cmd(ctx):
    """Show configuration paths, provider and warnings."""
    config, _, _ = _init(ctx.obj.get("config_path"))

    console.print(Panel("[bold]Configuration[/bold]", border_style="cyan"))
    console.print(f"  [bold]Project root:[/bold] {config.project_root}")
    console.print(f"  [bold]Provider:[/bold] {config.llm_provider}")
    console.print(f"  [bold]Model:[/bold] {config.get('generation.model')}")
    console.print(f"  [bold]Database:[/bold] {config.db_path}")
    console.print(f"  [bold]Cooldown:[/bold] {config.get('cache.cooldown_hours')}h")
    for warning in config.validate():
        console.print(f"  [yellow]⚠ {warning}[/yellow]")


# =============================================================================
# categories / persona
# =============================================================================

@cli.command("categories")
def categories_cmd():
    """List the available categories."""
    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Label")
    table.add_column("Source", style="dim")
    for category in TrendCategory:
        table.add_row(category.value, category.label, "local" if category.is_local else "AI search")
    console.print(table)


@cli.command("persona")
@click.argument("persona", required=False, type=click.Choice([p.value for p in Persona]))
@click.pass_context
def persona_cmd(ctx, persona: str | None):
    """Show or change the persona trends are tailored to."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))

    if persona is None:
        console.print(f"Viewing as: [cyan]{orchestrator.persona.label}[/cyan]")
        return

    try:
        asyncio.run(orchestrator.select_persona(Persona(persona)))
        console.print(f"[green]Persona set to {persona}[/green]")
        console.print(_render(orchestrator, orchestrator.snapshot(), "All", 0))
    finally:
        orchestrator.close()


# =============================================================================
# trends
# =============================================================================

@cli.command("trends")
@click.option(
    "--category", "-c", default=TrendCategory.ALL.value,
    type=click.Choice([c.value for c in TrendCategory]), help="Category to show",
)
@click.option("--refresh", is_flag=True, help="Fetch fresh trends even during the cooldown")
@click.option("--sentiment", default="All", type=click.Choice(SENTIMENT_FILTERS))
@click.option("--min-impact", default=0, type=click.IntRange(0, 100), callback=_validate_impact,
              help="Minimum impact score (steps of 10)")
@click.pass_context
def trends_cmd(ctx, category: str, refresh: bool, sentiment: str, min_impact: int):
    """Show trends for a category, fetching when the cache is stale."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))

    try:
        asyncio.run(orchestrator.resolve(TrendCategory(category), orchestrator.persona, force_refresh=refresh))
        console.print(_render(orchestrator, orchestrator.snapshot(), sentiment, min_impact))
    finally:
        orchestrator.close()


@cli.command("saved")
@click.pass_context
def saved_cmd(ctx):
    """Show saved trends."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    asyncio.run(orchestrator.select_category(TrendCategory.SAVED))
    console.print(_render(orchestrator, orchestrator.snapshot(), "All", 0))


@cli.command("reading-list")
@click.pass_context
def reading_list_cmd(ctx):
    """Show trends marked to read later."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    asyncio.run(orchestrator.select_category(TrendCategory.READ_LATER))
    console.print(_render(orchestrator, orchestrator.snapshot(), "All", 0))


async def _watch(orchestrator: TrendOrchestrator, category: TrendCategory, refresh: bool) -> None:
    with Live(_render(orchestrator, orchestrator.snapshot(), "All", 0), console=console, refresh_per_second=4) as live:
        orchestrator.listener = lambda state: live.update(_render(orchestrator, state, "All", 0))
        await orchestrator.resolve(category, orchestrator.persona, force_refresh=refresh)
        while orchestrator.countdown.state == TimerState.COUNTING:
            await asyncio.sleep(1)


@cli.command("watch")
@click.option(
    "--category", "-c", default=TrendCategory.ALL.value,
    type=click.Choice([c.value for c in TrendCategory]), help="Category to watch",
)
@click.option("--refresh", is_flag=True, help="Fetch fresh trends even during the cooldown")
@click.pass_context
def watch_cmd(ctx, category: str, refresh: bool):
    """Show trends with a live countdown to the next allowed update."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    try:
        asyncio.run(_watch(orchestrator, TrendCategory(category), refresh))
    except KeyboardInterrupt:
        console.print("[dim]Stopped watching[/dim]")
    finally:
        orchestrator.close()


# =============================================================================
# show / save / later
# =============================================================================

@cli.command("show")
@click.argument("trend_id")
@click.pass_context
def show_cmd(ctx, trend_id: str):
    """Show full details for a trend."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    trend = _lookup(orchestrator, trend_id)

    flags = []
    if orchestrator.saved.contains(trend.id):
        flags.append("saved")
    if orchestrator.read_later.contains(trend.id):
        flags.append("read later")

    info = (
        f"[bold]ID:[/bold] {trend.id}\n"
        f"[bold]Topic:[/bold] {trend.category}\n"
        f"[bold]Impact:[/bold] {trend.impact_score}/100\n"
        f"[bold]Sentiment:[/bold] {trend.sentiment.value}\n"
        f"[bold]Lists:[/bold] {', '.join(flags) if flags else 'none'}"
    )
    console.print(Panel(info, title=trend.title, border_style="cyan"))
    console.print(Panel(trend.summary or "[dim]No summary[/dim]", title="Summary", border_style="white"))
    console.print(Panel(trend.advice, title="Actionable Tip", border_style="green"))
    if trend.sources:
        console.print("[bold]Sources:[/bold]")
        for source in trend.sources:
            console.print(f"  • {source.title} [dim]{source.uri}[/dim]")


@cli.command("save")
@click.argument("trend_id")
@click.pass_context
def save_cmd(ctx, trend_id: str):
    """Toggle a trend in Saved Trends."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    trend = _lookup(orchestrator, trend_id)
    if orchestrator.toggle_saved(trend):
        console.print(f"[green]Saved:[/green] {trend.title}")
    else:
        console.print(f"[yellow]Removed from saved:[/yellow] {trend.title}")


@cli.command("later")
@click.argument("trend_id")
@click.pass_context
def later_cmd(ctx, trend_id: str):
    """Toggle a trend in the Read Later list."""
    _, _, orchestrator = _init(ctx.obj.get("config_path"))
    trend = _lookup(orchestrator, trend_id)
    if orchestrator.toggle_read_later(trend):
        console.print(f"[green]Added to reading list:[/green] {trend.title}")
    else:
        console.print(f"[yellow]Removed from reading list:[/yellow] {trend.title}")


# =============================================================================
# post
# =============================================================================

@cli.command("post")
@click.argument("trend_id")
@click.option(
    "--platform", "-p", default=SocialPlatform.LINKEDIN.value,
    type=click.Choice([p.value for p in SocialPlatform]), help="Target platform",
)
@click.pass_context
def post_cmd(ctx, trend_id: str, platform: str):
    """Draft a social media post from a trend."""
    from market_pulse.generator.social_post import SocialPostGenerator

    config, _, orchestrator = _init(ctx.obj.get("config_path"))
    trend = _lookup(orchestrator, trend_id)

    console.print(f"[dim]Drafting {platform} post...[/dim]")
    content = SocialPostGenerator(config).generate(trend, SocialPlatform(platform))
    console.print(Panel(content, title=f"{platform}: {trend.title}", border_style="green"))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
