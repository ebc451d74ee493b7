from __future__ import annotations

import json
import logging
from typing import Optional

from teams_enum.domain.classifier import classify, needs_presence
from teams_enum.domain.models import Verdict, VerdictKind
from teams_enum.errors import SinkIOError
from teams_enum.ports.lookup import DirectoryLookupPort, PresenceLookupPort, SearchResult
from teams_enum.ports.sink import ConsolePort, ResultSinkPort


class EnumerationService:
    """Application service probing one identity at a time.

    Stateless between calls, so a single instance is shared by all workers.
    """

    def __init__(
        self,
        directory: DirectoryLookupPort,
        presence: PresenceLookupPort,
        sink: ResultSinkPort,
        console: Optional[ConsolePort] = None,
        verbose: bool = False,
    ) -> None:
        self.directory = directory
        self.presence = presence
        self.sink = sink
        self.console = console
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def probe(self, identity: str) -> Verdict:
        try:
            verdict = self._evaluate(identity)
        except Exception as e:
            self.logger.error(f"Unexpected error probing {identity}: {e}", exc_info=True)
            verdict = Verdict(identity=identity, kind=VerdictKind.TRANSIENT_ERROR, message=f"Unexpected error: {e}")
        self._report(verdict)
        return verdict

    def _evaluate(self, identity: str) -> Verdict:
        result = self.directory.search_identity(identity)
        if self.verbose:
            self._dump(identity, result)

        kind = classify(result)
        presence = None
        if needs_presence(result):
            presence = self.presence.fetch_presence(result.record.mri or "")

        message = None
        if kind == VerdictKind.AUTH_ERROR:
            message = (
                "The token may be invalid or expired. "
                f"The status code returned by the server is {result.status_code}"
            )
            self.logger.warning(f"Authentication rejected while probing {identity}")
        elif kind == VerdictKind.TRANSIENT_ERROR:
            message = f"Something went wrong. The status code returned by the server is {result.status_code}"
            self.logger.warning(f"Unexpected status {result.status_code} while probing {identity}")

        return Verdict(
            identity=identity,
            kind=kind,
            status_code=result.status_code,
            record=result.record if kind == VerdictKind.CONFIRMED else None,
            presence=presence,
            message=message,
        )

    def _report(self, verdict: Verdict) -> None:
        if verdict.is_confirmed:
            try:
                self.sink.record(verdict.identity)
            except OSError as e:
                raise SinkIOError(f"Can't write {verdict.identity} to the output: {e}") from e
        if self.console is None:
            return
        self.console.print_line(verdict.summary(), style="green" if verdict.is_confirmed else None)
        if verdict.message:
            self.console.print_line(verdict.message)

    def _dump(self, identity: str, result: SearchResult) -> None:
        if self.console is None:
            return
        entries = [result.record.model_dump(by_alias=True)] if result.record is not None else []
        self.console.print_line(
            f"Email: {identity}\nStatus code: {result.status_code}\nResponse: \n{json.dumps(entries, indent=1)}"
        )
