"""Template registry for code skeletons and model prompts.

Templates are plain text files with a ``.tmpl`` extension anywhere under the
template directory, written in Jinja2 syntax (``{{ name }}``).  Rendering uses
``StrictUndefined``, so a field the template expects but does not receive is
an error.  Each file is registered under its base name, e.g.
``templates/playwright/pageObject.tmpl`` → ``pageObject``.

Callers never look templates up by string.  They pass one of the input
dataclasses below, which carries its :class:`TemplateKind` and the exact
fields that template receives.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Dict, Union

from jinja2 import Environment, StrictUndefined, Template

from pagegen.log import get_logger

TEMPLATE_SUFFIX = ".tmpl"

# Generated code, not HTML: no autoescaping.
_ENV = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)

logger = get_logger(__name__)


class TemplateKind(str, Enum):
    """Known templates, valued by their file base name."""

    PAGE_OBJECT = "pageObject"
    REFINE_PROMPT = "aiPrompt"
    TEST_PROMPT = "testPrompt"
    INSTRUCTION_PROMPT = "instructionPrompt"


class TemplateNotFoundError(LookupError):
    """Raised when a template is rendered but no file for it was loaded."""


# ---------------------------------------------------------------------------
# Template inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageObjectInputs:
    """Initial page object skeleton."""

    kind: ClassVar[TemplateKind] = TemplateKind.PAGE_OBJECT

    page_name: str
    url: str


@dataclass(frozen=True)
class RefinePromptInputs:
    """Prompt asking the model to complete the skeleton against the markup."""

    kind: ClassVar[TemplateKind] = TemplateKind.REFINE_PROMPT

    html: str
    initial_code: str


@dataclass(frozen=True)
class TestPromptInputs:
    """Prompt asking the model for tests covering a finished page object."""

    __test__ = False  # keep pytest from collecting this as a test class

    kind: ClassVar[TemplateKind] = TemplateKind.TEST_PROMPT

    page_object_code: str


@dataclass(frozen=True)
class InstructionPromptInputs:
    """Prompt applying one free-form user instruction to the current code."""

    kind: ClassVar[TemplateKind] = TemplateKind.INSTRUCTION_PROMPT

    code: str
    instruction: str


TemplateInputs = Union[
    PageObjectInputs, RefinePromptInputs, TestPromptInputs, InstructionPromptInputs
]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TemplateRegistry:
    """Compiled templates keyed by base name."""

    def __init__(self, templates: Dict[str, Template] | None = None) -> None:
        self._templates: Dict[str, Template] = dict(templates or {})

    @classmethod
    def load(cls, directory: Path) -> TemplateRegistry:
        """Compile every ``*.tmpl`` file under *directory* (recursively).

        A missing directory yields an empty registry; the problem surfaces as
        :class:`TemplateNotFoundError` when a template is first rendered.
        """
        templates: Dict[str, Template] = {}
        directory = Path(directory)
        if directory.is_dir():
            for path in sorted(directory.rglob(f"*{TEMPLATE_SUFFIX}")):
                templates[path.stem] = _ENV.from_string(path.read_text(encoding="utf-8"))
        logger.debug("templates_loaded", directory=str(directory), names=sorted(templates))
        return cls(templates)

    def render(self, inputs: TemplateInputs) -> str:
        """Render the template for *inputs* with its fields filled in.

        Raises:
            TemplateNotFoundError: No file was loaded for this kind.
            jinja2.UndefinedError: The template uses a name *inputs* lacks.
        """
        name = inputs.kind.value
        try:
            template = self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(
                f"Template {name!r} not found (expected {name}{TEMPLATE_SUFFIX})"
            ) from None
        return template.render(**asdict(inputs))
