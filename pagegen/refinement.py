"""Interactive refinement loop.

The user reviews the current code, types a change request, and the model
produces the next version.  Typing ``done`` (any case) ends the session;
there is no other way out short of an interrupt.
"""

from __future__ import annotations

from typing import Callable, Optional

import typer

from pagegen.generator import PageObjectGenerator
from pagegen.log import get_logger

DONE_SENTINEL = "done"

logger = get_logger(__name__)


def prompt_line(message: str) -> str:
    """Read one line from the terminal (re-prompts on empty input)."""
    return typer.prompt(typer.style(message, fg=typer.colors.YELLOW))


class RefinementSession:
    """One operator-driven refinement session over a piece of code."""

    def __init__(
        self,
        generator: PageObjectGenerator,
        code: str,
        read_line: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.generator = generator
        self.code = code
        self.version = 1
        self.read_line = read_line or prompt_line

    @property
    def _t(self):
        return self.generator.translations.t

    def step(self, instruction: str) -> bool:
        """Apply one instruction.  Returns ``True`` if a new version was made.

        Failures are reported and leave the code and version untouched.
        """
        console = self.generator.console
        try:
            with console.status(self._t("refiningCode")):
                completion = self.generator.refine(self.code, instruction)
        except Exception as exc:
            logger.warning("refinement_failed", version=self.version, error=repr(exc))
            console.print(f"[red]✖[/red] {self._t('refinementFail')}")
            typer.echo(f"{type(exc).__name__}: {exc}", err=True)
            return False

        if completion.fallback:
            console.print(f"[yellow]![/yellow] {self._t('modelEmptyResponse')}")

        self.code = completion.text
        self.version += 1
        console.print(f"[green]✔[/green] {self._t('refinementSuccess')}")
        self.generator.save_version(self.code, self.version)
        return True

    def run(self) -> str:
        """Loop until the operator enters ``done``; return the final code."""
        console = self.generator.console
        while True:
            console.print(f"[cyan]{self._t('currentCode', version=self.version)}[/cyan]")
            typer.echo(self.code)

            instruction = self.read_line(self._t("refinementPrompt"))
            if instruction.strip().lower() == DONE_SENTINEL:
                logger.debug("refinement_done", version=self.version)
                return self.code

            self.step(instruction)
