"""Page object generator CLI.

Usage:
    page-object-generator --url https://example.com --name HomePage \\
        --output home-page.ts --generateTests

Flow:
    load settings → render page & generate → refine interactively
    → save page object → (optionally) generate & save tests
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from pagegen.config import load_settings
from pagegen.generator import PageObjectGenerator, derive_test_file_name
from pagegen.i18n import load_translations
from pagegen.log import configure_logging, get_logger
from pagegen.refinement import RefinementSession

app = typer.Typer(
    name="page-object-generator",
    help="Generate Playwright page objects for a web page with an LLM.",
    add_completion=False,
)

logger = get_logger(__name__)


@app.command()
def generate(
    url: str = typer.Option(..., "--url", "-u", help="URL of the page to model."),
    name: str = typer.Option(..., "--name", "-n", help="Class name of the page object."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="File name for the page object, inside the output directory."
    ),
    generate_tests: bool = typer.Option(
        False, "--generateTests", "-t", help="Also generate a test file for the page object."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline steps to stderr."),
) -> None:
    """Generate a page object for URL, refine it interactively, and save it."""
    configure_logging("DEBUG" if verbose else None)

    settings, from_file = load_settings()
    translations = load_translations(settings.language)
    t = translations.t
    console = Console(soft_wrap=True)

    if not from_file:
        console.print(f"[red]{t('configLoadFail')}[/red]")

    try:
        generator = PageObjectGenerator(settings, translations, console=console)

        code = generator.generate_page_object(url, name)
        console.print(f"[green]{t('initialCodeGenerated')}[/green]")
        typer.echo(code)

        final_code = RefinementSession(generator, code).run()
        console.print(f"[green]{t('finalCodeGenerated')}[/green]")
        typer.echo(final_code)

        if output:
            generator.save_to_file(final_code, output)

        if generate_tests:
            test_code = generator.generate_tests(final_code)
            console.print(f"[green]{t('testCodeGenerated')}[/green]")
            typer.echo(test_code)
            if output:
                generator.save_to_file(test_code, derive_test_file_name(output))
    except (typer.Exit, typer.Abort):
        raise
    except Exception as exc:
        logger.error("run_failed", error=repr(exc), exc_info=verbose)
        console.print(f"[red]{t('errorOccurred')}[/red] " + escape(f"{type(exc).__name__}: {exc}"))
        raise typer.Exit(1) from exc


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
