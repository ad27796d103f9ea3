"""Markup reduction: shrinks captured HTML before it is sent to the model.

The reduction removes what the model does not need to describe the page
(comments, indentation, blank lines) without changing the element tree.
Running it twice gives the same result as running it once.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

# ---------------------------------------------------------------------------
# Tag classes
# ---------------------------------------------------------------------------

# Text inside these is left exactly as captured.
_PRESERVE_WHITESPACE = {"pre", "textarea", "script", "style"}

# Whitespace between two of these is significant ("<b>a</b> <i>b</i>").
_INLINE_TAGS = {
    "a", "abbr", "b", "bdi", "bdo", "button", "cite", "code", "data", "dfn",
    "em", "i", "img", "input", "kbd", "label", "mark", "q", "s", "samp",
    "select", "small", "span", "strong", "sub", "sup", "time", "u", "var",
}

# HTML whitespace only; U+00A0 (&nbsp;) is content.
_HTML_SPACE = " \t\n\r\f"
_WHITESPACE = re.compile(r"[ \t\n\r\f]+")
_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_CSS_PUNCTUATION = re.compile(r"[ \t\n\r\f]*([{};,])[ \t\n\r\f]*")
# CSS allows the <!-- and --> tokens anywhere at the top level of a sheet.
_CSS_COMMENT_TOKEN = re.compile(r"<!--|-->")
_SCRIPT_GUARD = re.compile(r"^\s*<!--|-->\s*$")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _minify_css(css: str) -> str:
    css = _CSS_COMMENT_TOKEN.sub("", css)
    css = _CSS_COMMENT.sub("", css)
    css = _WHITESPACE.sub(" ", css)
    return _CSS_PUNCTUATION.sub(r"\1", css).strip(_HTML_SPACE)


def _minify_js(js: str) -> str:
    """Trim every line and drop blank ones.

    Line breaks are kept because automatic semicolon insertion depends on them.
    """
    js = _SCRIPT_GUARD.sub("", js)
    lines = (line.strip() for line in js.splitlines())
    return "\n".join(line for line in lines if line)


def _is_inline(node: object) -> bool:
    return isinstance(node, Tag) and node.name in _INLINE_TAGS


def _minify_embedded(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(["script", "style"]):
        content = tag.string
        if content is None:
            continue
        minified = _minify_css(content) if tag.name == "style" else _minify_js(content)
        if minified != content:
            content.replace_with(type(content)(minified))


def _collapse_whitespace(soup: BeautifulSoup) -> None:
    for text in list(soup.find_all(string=True)):
        # Doctype, CData and friends are NavigableString subclasses.
        if type(text) is not NavigableString:
            continue
        if any(parent.name in _PRESERVE_WHITESPACE for parent in text.parents):
            continue

        collapsed = _WHITESPACE.sub(" ", text)
        if not collapsed.strip(_HTML_SPACE):
            if _is_inline(text.previous_sibling) and _is_inline(text.next_sibling):
                collapsed = " "
            else:
                text.extract()
                continue
        if collapsed != text:
            text.replace_with(NavigableString(collapsed))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def reduce_markup(html: str) -> str:
    """Return *html* without comments, redundant whitespace, or bloated inline code.

    Steps:
        1. Remove every HTML comment.
        2. Merge the text nodes that the removal left side by side.
        3. Minify ``<style>`` and ``<script>`` bodies.
        4. Collapse whitespace in text, except inside ``<pre>``/``<textarea>``.
    """
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    soup.smooth()

    _minify_embedded(soup)
    _collapse_whitespace(soup)

    return soup.decode()
