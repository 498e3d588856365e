"""Click-based CLI interface for farmcheck."""

import sys
from pathlib import Path

import click

from farmcheck.collector import build_probes, collect
from farmcheck.config import load_config
from farmcheck.errors import ValidationError
from farmcheck.factory import load_findings
from farmcheck.formatters.html import render_html
from farmcheck.log import setup_logging
from farmcheck.report import has_review_items, print_summary, render_json

FORMAT_CHOICES = ["html", "json"]


def _emit(roots, fmt, output, title, include_info, exit_code):
    if fmt == "json":
        text_out = render_json(roots)
    else:
        text_out = render_html(roots, title=title, include_informational=include_info)

    if output:
        Path(output).write_text(text_out, encoding="utf-8")
        print_summary(roots)
        click.echo(f"Report written to {output}")
    else:
        click.echo(text_out)

    if exit_code and has_review_items(roots):
        sys.exit(1)


@click.group()
@click.version_option(package_name="farmcheck")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .farmcheck.yml config file.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx, config_path, verbose):
    """farmcheck - Server farm health report generator."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path=config_path, project_root=".")
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default="html")
@click.option("--output", "-o", type=str, default=None, help="Write the report to a file.")
@click.option("--include-info", is_flag=True, help="Add an Informational Items section.")
@click.option("--exit-code", is_flag=True, help="Exit with code 1 if any Critical or Warning finding exists.")
@click.pass_context
def scan(ctx, urls, fmt, output, include_info, exit_code):
    """Run the enabled probes against each URL and render a report."""
    config = ctx.obj["config"]
    roots = collect(build_probes(urls, config))
    include_info = include_info or config.include_informational
    _emit(roots, fmt, output, config.report_title, include_info, exit_code)


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default="html")
@click.option("--output", "-o", type=str, default=None, help="Write the report to a file.")
@click.option("--include-info", is_flag=True, help="Add an Informational Items section.")
@click.option("--exit-code", is_flag=True, help="Exit with code 1 if any Critical or Warning finding exists.")
@click.pass_context
def render(ctx, path, fmt, output, include_info, exit_code):
    """Render a findings document (YAML or JSON) as a report."""
    config = ctx.obj["config"]
    try:
        roots = load_findings(path)
    except (ValidationError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    include_info = include_info or config.include_informational
    _emit(roots, fmt, output, config.report_title, include_info, exit_code)
