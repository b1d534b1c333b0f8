"""oichart CLI."""

import logging
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from oichart.app import ChartApp, setup_logging
from oichart.config_loader import AppConfig, WebConfig, load_config_with_overrides
from oichart.exceptions import OIChartError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


def config_option(f):
    return click.option(
        "--config",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)",
    )(f)


def source_options(f):
    f = click.option("--symbol", help="Override instrument symbol")(f)
    f = click.option("--table", help="Override source table")(f)
    return f


def _load_config(config, **overrides) -> AppConfig:
    if config is None and DEFAULT_CONFIG_PATH.exists():
        config = DEFAULT_CONFIG_PATH
    try:
        cfg = load_config_with_overrides(config, **overrides)
    except (ValidationError, yaml.YAMLError) as e:
        _fatal(e)
    setup_logging(cfg)
    return cfg


def _fatal(e: Exception) -> None:
    click.echo(f"Fatal error: {e}", err=True)
    sys.exit(1)


@click.group()
def cli():
    """oichart: price / open interest chart viewer for ClickHouse feature tables."""
    pass


@cli.command()
@config_option
@source_options
@click.option("--window-size", type=int, help="Points per window")
@click.option("--interval", type=float, help="Seconds between auto-advance ticks")
def terminal(config, table, symbol, window_size, interval):
    """Full-screen terminal dashboard."""
    from oichart.ui.dashboard import TerminalDashboard
    from oichart.ui.keys import KeyReader

    cfg = _load_config(
        config, table=table, symbol=symbol, window_size=window_size, interval_seconds=interval
    )
    chart = ChartApp(cfg)
    try:
        loop = chart.initialize_terminal()
    except OIChartError as e:
        _fatal(e)

    commands = KeyReader().start()
    try:
        with TerminalDashboard() as dashboard:
            loop.attach(dashboard)
            loop.run_interactive(commands, cfg.window.interval_seconds)
    except KeyboardInterrupt:
        pass
    finally:
        chart.close()


@cli.command(name="ascii")
@config_option
@source_options
@click.option("--window-size", type=int, help="Points per window")
@click.option("--interval", type=float, help="Seconds between auto-advance ticks")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors")
def ascii_chart(config, table, symbol, window_size, interval, no_color):
    """Plain ASCII chart redrawn in place."""
    from oichart.ui.ascii_chart import AsciiChartRenderer
    from oichart.ui.keys import KeyReader

    cfg = _load_config(
        config, table=table, symbol=symbol, window_size=window_size, interval_seconds=interval
    )
    chart = ChartApp(cfg)
    try:
        loop = chart.initialize_terminal()
    except OIChartError as e:
        _fatal(e)

    click.echo("Starting chart display... Press q to exit")
    loop.attach(AsciiChartRenderer(cfg.ascii, color=not no_color))
    commands = KeyReader().start()
    try:
        loop.run_interactive(commands, cfg.window.interval_seconds)
    except KeyboardInterrupt:
        pass
    finally:
        chart.close()


@cli.command()
@config_option
@source_options
@click.option("--host", help="Bind address")
@click.option("--port", type=int, help="Listen port")
def web(config, table, symbol, host, port):
    """Browser chart served over HTTP."""
    from oichart.web.server import serve

    cfg = _load_config(config, table=table, symbol=symbol)
    web_updates = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    if web_updates:
        try:
            web_config = WebConfig.model_validate({**cfg.web.model_dump(), **web_updates})
        except ValidationError as e:
            _fatal(e)
        cfg = cfg.model_copy(update={"web": web_config})

    chart = ChartApp(cfg)
    try:
        chart.initialize_web()
    except OIChartError as e:
        _fatal(e)

    try:
        serve(chart)
    finally:
        chart.close()


@cli.command()
@config_option
@source_options
def check(config, table, symbol):
    """Check the database connection and count records for the symbol."""
    cfg = _load_config(config, table=table, symbol=symbol)
    chart = ChartApp(cfg)
    try:
        chart.client.ping()
        records = chart.fetch()
    except OIChartError as e:
        click.echo(f"Check failed: {e}", err=True)
        sys.exit(1)
    finally:
        chart.close()

    click.echo(f"Successfully connected to ClickHouse at {cfg.clickhouse.base_url}")
    click.echo(
        f"Found {len(records)} records for {chart.symbol} in {cfg.clickhouse.database}.{chart.table} "
        f"({records[0].time} - {records[-1].time})"
    )


@cli.command()
@config_option
def tables(config):
    """List tables in the configured database."""
    cfg = _load_config(config)
    chart = ChartApp(cfg)
    try:
        names = chart.client.list_tables()
    except OIChartError as e:
        _fatal(e)
    finally:
        chart.close()

    for name in names:
        click.echo(name)


@cli.command()
@config_option
@click.option("--table", required=True, help="Table to inspect")
def symbols(config, table):
    """List symbols available in a table."""
    cfg = _load_config(config)
    chart = ChartApp(cfg)
    try:
        names = chart.client.list_symbols(table)
    except OIChartError as e:
        _fatal(e)
    finally:
        chart.close()

    for name in names:
        click.echo(name)


if __name__ == "__main__":
    cli()

# Alias for __main__.py
main = cli
