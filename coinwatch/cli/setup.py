"""Setup command for coinwatch CLI."""

import click
from rich.console import Console
from rich.panel import Panel

from coinwatch.config import CONFIG_PATH, create_template_config

console = Console()


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a template configuration file.
    
    \b
    Examples:
      coinwatch init
      coinwatch --config ./coinwatch.toml init --force
    """
    config_path = (ctx.obj or {}).get("config_path") or CONFIG_PATH

    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        return

    path = create_template_config(config_path)
    console.print(Panel(
        f"[green]Config written to[/green] [cyan]{path}[/cyan]\n\n"
        "Set [bold]telegram.bot_token[/bold] (or TELEGRAM_BOT_TOKEN) to deliver alerts,\n"
        "and [bold]openai.api_key[/bold] (or OPENAI_API_KEY) for AI commentary.",
        title="[bold]coinwatch[/bold]",
        border_style="green",
    ))
