"""Page object synthesis.

:class:`PageObjectGenerator` ties the pipeline together: render the page in a
headless browser, shrink the markup, fill the skeleton template, and let the
chat model turn the skeleton into a complete page object.  It also writes the
results to the output directory.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from pagegen.config import Settings
from pagegen.i18n import Translations
from pagegen.llm import Completion, complete, get_chat_model
from pagegen.log import get_logger
from pagegen.scraper import DEVICE_SEPARATOR, load_page, reduce_markup
from pagegen.templates import (
    InstructionPromptInputs,
    PageObjectInputs,
    RefinePromptInputs,
    TemplateRegistry,
    TestPromptInputs,
)

VERSION_FILE_NAME = "latest.txt"

_BASE_HREF = re.compile(r"""<base\b[^>]*?\bhref=["']([^"']+)["']""", re.IGNORECASE)

logger = get_logger(__name__)


def extract_base_url(html: str, default: str = "") -> str:
    """Return the ``href`` of the first ``<base>`` tag in *html*, else *default*."""
    match = _BASE_HREF.search(html)
    return match.group(1) if match else default


def derive_test_file_name(output: str) -> str:
    """Derive the test file name for an output file: ``foo.ts`` → ``foo.test.ts``."""
    path = Path(Path(output).name)
    return f"{path.stem}.test{path.suffix}"


class PageObjectGenerator:
    """Generates, refines and saves page objects for one run."""

    def __init__(
        self,
        settings: Settings,
        translations: Translations,
        templates: Optional[TemplateRegistry] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.settings = settings
        self.translations = translations
        if templates is None:
            templates = TemplateRegistry.load(settings.template_dir)
        self.templates = templates
        self.console = console or Console(soft_wrap=True)
        self._llm: Any = None

    @property
    def llm(self) -> Any:
        """The chat model, created on first use."""
        if self._llm is None:
            self._llm = get_chat_model(self.settings)
        return self._llm

    # ------------------------------------------------------------------
    # Console helpers
    # ------------------------------------------------------------------

    def _succeed(self, key: str, **params: Any) -> None:
        self.console.print("[green]✔[/green] " + escape(self.translations.t(key, **params)))

    def _fail(self, key: str, **params: Any) -> None:
        self.console.print("[red]✖[/red] " + escape(self.translations.t(key, **params)))

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_page_object(self, url: str, page_name: str) -> str:
        """Build a page object for *url* named *page_name*.

        Steps:
            1. Render the page once per configured device.
            2. Reduce each device's markup and rejoin with the separator.
            3. Fill the ``pageObject`` skeleton with the name and base URL.
            4. Fill the ``aiPrompt`` template with the markup and skeleton.
            5. Ask the model; an empty reply keeps the skeleton.

        Raises:
            Any error from the browser, the templates or the model.  Nothing
            is retried.
        """
        t = self.translations.t
        log = logger.bind(url=url, page_name=page_name)

        with self.console.status(t("generating")) as status:
            try:
                status.update(t("loadingPage", count=len(self.settings.devices)))
                captured = load_page(url, self.settings.devices)

                status.update(t("minifying"))
                html = DEVICE_SEPARATOR.join(
                    reduce_markup(fragment) for _, fragment in captured.fragments
                )
                log.debug("markup_reduced", raw_chars=len(captured.joined()), chars=len(html))

                status.update(t("generatingInitial"))
                initial_code = self.templates.render(
                    PageObjectInputs(page_name=page_name, url=extract_base_url(html, url))
                )

                status.update(t("refiningCode"))
                prompt = self.templates.render(
                    RefinePromptInputs(html=html, initial_code=initial_code)
                )
                completion = complete(self.llm, prompt, fallback=initial_code)
            except Exception:
                self._fail("generationFail")
                raise

        if completion.fallback:
            log.warning("model_returned_skeleton")
        self._succeed("generationSuccess")
        return completion.text

    def refine(self, code: str, instruction: str) -> Completion:
        """Apply a free-form *instruction* to *code* with one model call.

        An empty reply returns *code* unchanged with ``fallback`` set.
        """
        prompt = self.templates.render(
            InstructionPromptInputs(code=code, instruction=instruction)
        )
        return complete(self.llm, prompt, fallback=code)

    def generate_tests(self, page_object_code: str) -> str:
        """Ask the model for a test file covering *page_object_code*.

        Unlike :meth:`generate_page_object` there is nothing sensible to fall
        back to, so an empty reply yields an empty string.
        """
        t = self.translations.t
        with self.console.status(t("generatingTests")):
            try:
                prompt = self.templates.render(
                    TestPromptInputs(page_object_code=page_object_code)
                )
                completion = complete(self.llm, prompt, fallback="")
            except Exception:
                self._fail("testGenerationFail")
                raise

        self._succeed("testGenerationSuccess")
        return completion.text

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_version(self, code: str, version: int) -> Path:
        """Write the work-in-progress *code* under ``<output_dir>/versions``.

        Every version goes to the same file, so only the latest survives;
        *version* is reported to the user but not part of the file name.
        """
        versions_dir = self.settings.versions_dir
        versions_dir.mkdir(parents=True, exist_ok=True)
        file_path = versions_dir / VERSION_FILE_NAME
        file_path.write_text(code, encoding="utf-8")

        logger.debug("version_saved", version=version, path=str(file_path))
        message = self.translations.t("versionSaved", version=version, filePath=file_path)
        self.console.print(f"[green]{escape(message)}[/green]")
        return file_path

    def save_to_file(self, code: str, file_name: str) -> Path:
        """Write *code* to ``<output_dir>/<file_name>`` and return the path."""
        self.settings.output_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.settings.output_dir / file_name
        file_path.write_text(code, encoding="utf-8")

        logger.debug("file_saved", path=str(file_path))
        message = self.translations.t("fileSaved", filePath=file_path)
        self.console.print(f"[green]{escape(message)}[/green]")
        return file_path
