"""Main CLI entry point for coinwatch.

Defines the top-level click group. Subcommands are loaded lazily.
"""

from pathlib import Path

import click

from coinwatch.log import setup_logging


class LazyGroup(click.Group):
    """Click group whose subcommands are imported on first use.

    ``coinwatch price BTC`` should not pay for importing the Agents SDK,
    so each subcommand is registered as ``"module:attribute"`` and only
    imported when it is invoked or listed in help.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self.commands:
            return self.commands[cmd_name]
        if cmd_name not in self._lazy_subcommands:
            return None

        import importlib

        module_path, attr_name = self._lazy_subcommands[cmd_name].split(":")
        cmd = getattr(importlib.import_module(module_path), attr_name, None)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(
                f"{module_path}.{attr_name} is not a click command"
            )

        self.add_command(cmd, cmd_name)
        return cmd


# Subcommand name -> "module:attribute"
LAZY_SUBCOMMANDS = {
    "init": "coinwatch.cli.setup:init",
    # Market data
    "price": "coinwatch.cli.data:price",
    "top": "coinwatch.cli.data:top",
    "analyze": "coinwatch.cli.analyze:analyze",
    # Alerts
    "alert": "coinwatch.cli.alerts:create_alert",
    "alerts": "coinwatch.cli.alerts:list_alerts",
    "monitor": "coinwatch.cli.monitor:monitor",
    # Portfolio
    "portfolio": "coinwatch.cli.portfolio:portfolio",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="coinwatch")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: ~/.config/coinwatch/config.toml).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """coinwatch - crypto prices, AI commentary, price alerts and portfolio.
    
    \b
    Quick Start:
      coinwatch init                       # Create a config file
      coinwatch price BTC                  # Current price and 24h stats
      coinwatch alert BTC 50000 above      # Alert when BTC reaches 50,000
      coinwatch monitor                    # Run the alert monitor
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
