from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from typing import Optional

import typer
from pydantic import ValidationError

from teams_enum.adapters.console import RichConsole
from teams_enum.adapters.teams.client import TeamsClient
from teams_enum.application.pool import WorkerPool
from teams_enum.application.services import EnumerationService
from teams_enum.config import EnumSettings
from teams_enum.domain.models import VerdictKind
from teams_enum.errors import TeamsEnumError
from teams_enum.infrastructure.sink import LineResultSink
from teams_enum.infrastructure.source import open_identity_source

EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_AUTH_ERROR = 3

app = typer.Typer(
    name="teams-enum",
    help="User enumeration on Microsoft Teams.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def configure(
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="TEAMS_ENUM_LOG_LEVEL", help="Diagnostic log level (stderr)"
    ),
) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s", stream=sys.stderr)


@app.command()
def userenum(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Email address"),
    file: Optional[str] = typer.Option(None, "--file", "-f", help="File containing the email addresses ('-' for stdin)"),
    token: str = typer.Option(..., "--token", "-t", envvar="TEAMS_ENUM_TOKEN", help="Full Bearer token"),
    threads: int = typer.Option(5, "--threads", "-T", min=1, help="Number of threads to use"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="File to write found emails to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Dump every search response"),
) -> None:
    """
    Users can be enumerated on Microsoft Teams with the search features.

    Validates an email address or a list of email addresses. For existing
    accounts the presence of the user and the device used to connect are
    retrieved as well.
    """
    try:
        settings = EnumSettings(
            email=email, file=file, token=token, threads=threads, output=output, verbose=verbose
        )
    except ValidationError as e:
        message = "; ".join(error["msg"].removeprefix("Value error, ") for error in e.errors())
        typer.echo(f"ERROR: {message}", err=True)
        raise typer.Exit(code=EXIT_USAGE)

    console = RichConsole()
    auth_failed = False
    try:
        with ExitStack() as stack:
            identities = None
            if settings.file is not None:
                identities = stack.enter_context(open_identity_source(settings.file))
            # Without -o results share stdout with the console, so they share its lock too.
            sink_lock = console.lock if settings.output is None else None
            sink = stack.enter_context(LineResultSink.open(settings.output, lock=sink_lock))
            client = stack.enter_context(TeamsClient(settings.bearer))
            service = EnumerationService(client, client, sink, console=console, verbose=settings.verbose)

            if identities is None:
                verdict = service.probe(settings.email)
                auth_failed = verdict.kind == VerdictKind.AUTH_ERROR
            else:
                pool = WorkerPool(service, workers=settings.threads, queue_size=settings.queue_size)
                report = pool.run(identities)
                auth_failed = report.auth_errors > 0
    except TeamsEnumError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=EXIT_FATAL)

    if auth_failed:
        raise typer.Exit(code=EXIT_AUTH_ERROR)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
