"""Chat model access.

All model traffic is a single request / single response exchange with no
retries.  :func:`complete` returns a :class:`Completion` whose ``fallback``
flag is set when the model produced no usable text, which is a normal
outcome rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from langchain_openai import ChatOpenAI

from pagegen.config import Settings
from pagegen.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Completion:
    """Text returned by one model call."""

    text: str
    fallback: bool = False


def get_chat_model(settings: Settings) -> Any:
    """Return a LangChain chat model configured from *settings*."""
    kwargs: dict[str, Any] = {"model": settings.ai_model}
    if settings.openai_api_key:
        kwargs["api_key"] = settings.openai_api_key
    return ChatOpenAI(**kwargs)


def _response_text(response: Any) -> str:
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        # Multi-part messages: keep the text parts only.
        content = "".join(
            part if isinstance(part, str) else part.get("text", "")
            for part in content
        )
    return content or ""


def complete(llm: Any, prompt: str, fallback: str) -> Completion:
    """Send *prompt* as one user message and return the reply.

    Args:
        llm: A LangChain chat model (anything with ``.invoke(str)``).
        prompt: The fully rendered prompt.
        fallback: Text to use when the reply is empty.

    Raises:
        Whatever the underlying client raises (network, auth, rate limit).
    """
    response = llm.invoke(prompt)
    text = _response_text(response)
    logger.debug("model_called", prompt_chars=len(prompt), reply_chars=len(text))

    if not text.strip():
        logger.info("model_empty_reply")
        return Completion(text=fallback, fallback=True)
    return Completion(text=text)
