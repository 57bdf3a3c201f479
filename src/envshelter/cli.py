from __future__ import annotations

import logging
import pathlib
from typing import List, Optional

import click
import typer
import structlog
from rich.console import Console
from rich.markup import escape

from .config import ConfigError, ShelterSettings, build_policy, load_config
from .engine.controller import ShelterController
from .engine.features import Feature
from .engine.planner import StyleTag
from .engine.ports import InMemoryDocuments
from .engine.redactor import mask_value

console = Console()
log = structlog.get_logger()
app = typer.Typer(add_completion=False, no_args_is_help=True, help="envshelter: hide secrets in .env files")


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"envshelter {__version__}")
        raise typer.Exit()


def _settings() -> ShelterSettings:
    return click.get_current_context().obj["config"]


def _console_notifier(message: str, level: int) -> None:
    log.info("notify", message=message, level=logging.getLevelName(level))
    style = "red" if level >= logging.ERROR else "yellow" if level >= logging.WARNING else "dim"
    console.print(f"[{style}]{escape(message)}[/{style}]")


@app.callback()
def common(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(None, "--config", help="Path to .envshelter.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logs"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """Global options (config, verbosity)."""
    structlog.configure(processors=[structlog.processors.JSONRenderer()])
    try:
        settings = load_config(config) if config else ShelterSettings()
    except ConfigError as e:
        console.print(f"[red]Invalid config: {escape(str(e))}[/red]")
        raise typer.Exit(code=2)
    ctx.obj = {"config": settings}
    if verbose:
        log.info("verbose_enabled")


@app.command()
def show(
    src: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False, help="Env file to display"),
    reveal: Optional[int] = typer.Option(None, "--reveal", min=1, help="Show the real value of this line"),
    disable: List[str] = typer.Option([], "--disable", help="Feature to switch off (repeatable)"),
    html: Optional[pathlib.Path] = typer.Option(None, "--html", help="Write an HTML report to this path"),
):
    """Print a file the way the editor overlay shows it."""
    settings = _settings()
    if not settings.shelter.modules:
        # no modules configured: protect file rendering by default
        settings = settings.model_copy(deep=True)
        settings.shelter.modules = {Feature.FILES.value: True}

    documents = InMemoryDocuments({str(src): src.read_text(errors="ignore")})
    controller = ShelterController(settings, documents, notifier=_console_notifier)
    doc = str(src)

    for name in disable:
        if not controller.set_state("disable", name):
            raise typer.Exit(code=2)
    if not controller.is_env_document(doc):
        console.print(f"[yellow]{escape(src.name)} is not recognized as an env file; shown as is[/yellow]")
    if reveal is not None:
        controller.reveal_current_line(doc, reveal)
    controller.redraw(doc)

    lines = documents.lines(doc)
    log.info("show", path=doc, overlays=len(controller.sink.get(doc)))
    styles = {ins.line: ins.style_tag for ins in controller.sink.get(doc)}
    for number, text in enumerate(controller.sink.render(doc, lines), start=1):
        tag = styles.get(number)
        color = "green" if tag is StyleTag.REVEALED else "dim" if tag is StyleTag.MASKED else "default"
        console.print(f"[{color}]{escape(text)}[/{color}]", highlight=False)

    if html:
        from .reporting.html import build_report, write_report
        write_report(build_report(src.name, lines, controller.sink.get(doc)), html)
        console.print(f"[green]Report written:[/green] {html}")


@app.command()
def mask(
    value: str = typer.Argument(..., help="Value to redact (quotes are kept)"),
    partial: Optional[bool] = typer.Option(None, "--partial/--no-partial", help="Override partial mode"),
):
    """Print VALUE as it would be displayed."""
    configuration = _settings().shelter.configuration
    if partial is not None:
        configuration = configuration.model_copy(update={"partial_mode": partial})
    console.print(mask_value(value, build_policy(configuration)), highlight=False, markup=False)


@app.command()
def check(src: pathlib.Path = typer.Argument(..., help="File name to test")):
    """Tell whether SRC is treated as a secret-bearing env file."""
    controller = ShelterController(_settings())
    if controller.recognizer(str(src)):
        console.print(f"[green]{escape(str(src))} is an env file[/green]")
        return
    console.print(f"{escape(str(src))} is not an env file")
    raise typer.Exit(code=1)
