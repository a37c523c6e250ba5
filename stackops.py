#!/usr/bin/env python
import logging
import sys
from datetime import datetime, timedelta, timezone

import click
from botocore.exceptions import BotoCoreError

import stackmodules.extractor as extractor
import stackmodules.snapshot as snapshot
from stackmodules.component import LogQuery, MetricRequest
from stackmodules.connection import get_connection
from stackmodules.exceptions import StackOpsError
from stackmodules.operations import OperationsProvider, StackOperationsProvider


__version__ = "0.1"


def _fail(message: str):
    click.echo(click.style(f"\nERROR: {message}\n", fg="red", bold=True), err=True)
    sys.exit(1)


def _configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_components(source: str):
    try:
        resources = snapshot.load_snapshot(source)
    except StackOpsError as e:
        _fail(str(e))
    return extractor.extract_components(resources)


def _connect(region, profile):
    try:
        return get_connection(region, profile)
    except BotoCoreError as e:
        _fail(f"Unable to connect to AWS: {e}")


def _find_component(components, urn: str):
    component = components.get(urn)
    if component is None:
        # Accept a bare component name when it is unambiguous
        matches = [c for c in components.values() if c.name == urn]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            urns = ", ".join(sorted(c.urn for c in matches))
            _fail(f"Component name '{urn}' is ambiguous, use one of: {urns}")
        _fail(f"Component '{urn}' not found in snapshot")
    return component


def _print_logs(entries):
    for entry in entries:
        stamp = datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc)
        click.echo(f"{stamp.isoformat()}[{entry.id}] {entry.message}")


@click.version_option(version=__version__, prog_name="stackops")
@click.group()
def cli():
    """
    stackops lists the framework components of a deployed stack and queries their logs and metrics

    For help with a specific command type:

    stackops [COMMAND] --help

    """
    pass


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option("--snapshot", "source", required=True, help="Path to deployment checkpoint JSON")
def components(debug, source):
    """List framework components found in a snapshot"""
    _configure_logging(debug)
    found = _load_components(source)
    click.echo(click.style("\nComponents:\n", fg="white", bold=True))
    click.echo(extractor.format_components(found))
    if debug:
        for urn in sorted(found):
            click.echo(urn)


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option("--snapshot", "source", required=True, help="Path to deployment checkpoint JSON")
@click.option(
    "--component",
    default=None,
    help="Component URN or name (default: all functions in the stack)",
)
@click.option("--region", default=None, help="AWS region (default: from environment)")
@click.option("--profile", default=None, help="AWS shared credentials profile")
def logs(debug, source, component, region, profile):
    """Show runtime logs of functions in the stack"""
    _configure_logging(debug)
    found = _load_components(source)
    connection = _connect(region, profile)
    try:
        if component:
            provider = OperationsProvider.for_component(
                connection, _find_component(found, component)
            )
            entries = provider.get_logs(LogQuery())
        else:
            entries = StackOperationsProvider(connection, found).get_logs(LogQuery())
    except StackOpsError as e:
        _fail(str(e))
    _print_logs(entries)


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option("--snapshot", "source", required=True, help="Path to deployment checkpoint JSON")
@click.option("--component", required=True, help="Component URN or name")
@click.option("--metric", default=None, help="Metric name (omit to list supported metrics)")
@click.option("--minutes", default=60, show_default=True, help="Size of the query window")
@click.option("--period", default=60, show_default=True, help="Aggregation period in seconds")
@click.option("--region", default=None, help="AWS region (default: from environment)")
@click.option("--profile", default=None, help="AWS shared credentials profile")
def metrics(debug, source, component, metric, minutes, period, region, profile):
    """List or query metrics of a component"""
    _configure_logging(debug)
    found = _load_components(source)
    target = _find_component(found, component)
    if metric is None:
        for name in OperationsProvider.for_component(None, target).list_metrics():
            click.echo(name)
        return
    provider = OperationsProvider.for_component(_connect(region, profile), target)
    end_time = datetime.now(timezone.utc)
    request = MetricRequest(
        name=metric,
        start_time=end_time - timedelta(minutes=minutes),
        end_time=end_time,
        period=period,
    )
    try:
        datapoints = provider.get_metric_statistics(request)
    except StackOpsError as e:
        _fail(str(e))
    for dp in datapoints:
        click.echo(
            f"{dp.timestamp.isoformat()} sum={dp.sum} count={dp.sample_count} "
            f"avg={dp.average} max={dp.maximum} min={dp.minimum} {dp.unit}"
        )


if __name__ == "__main__":
    cli()
