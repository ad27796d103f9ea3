"""Tests for page capture and markup reduction.

Mocking strategy:
- ``sync_playwright`` is patched in ``pagegen.scraper.loader`` with a
  ``MagicMock`` chain (playwright → browser → context → page), so no browser
  install is needed.  ``page.content`` returns one canned document per call.
- The reducer is pure and runs against literal HTML strings.
"""

from __future__ import annotations

import random
from unittest.mock import MagicMock, patch

import pytest

from pagegen.scraper.loader import load_page
from pagegen.scraper.models import DEVICE_SEPARATOR, CapturedMarkup
from pagegen.scraper.reducer import reduce_markup


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_PAGE_HTML = """\
<!DOCTYPE html>
<html>
  <head>
    <!-- analytics -->
    <title>Shop</title>
    <style>
      /* layout */
      body   { margin : 0;
               padding: 0 }
    </style>
    <script>
      <!--
      var a = 1;

      function f() {
          return a;
      }
      -->
    </script>
  </head>
  <body>
    <main>
      <h1>Welcome    to
          the shop</h1>
      <!-- promo banner -->
      <p>Buy <b>now</b> <i>today</i></p>
      <pre>  keep
   this  </pre>
      <a href="/cart">Cart</a>
    </main>
  </body>
</html>
"""


def _fake_playwright(contents, devices=None):
    """Return ``(sync_playwright_mock, pw)`` wired to serve *contents* in order."""
    pw = MagicMock()
    pw.devices = devices if devices is not None else {
        "Desktop Chrome": {"viewport": {"width": 1280, "height": 720}},
        "iPhone 13": {"viewport": {"width": 390, "height": 844}, "is_mobile": True},
    }
    browser = pw.chromium.launch.return_value
    page = browser.new_context.return_value.new_page.return_value
    page.content.side_effect = list(contents)

    sync_playwright = MagicMock()
    sync_playwright.return_value.__enter__.return_value = pw
    sync_playwright.return_value.__exit__.return_value = False
    return sync_playwright, pw


# ---------------------------------------------------------------------------
# reduce_markup
# ---------------------------------------------------------------------------

class TestReduceMarkup:
    def test_strips_all_comments(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<!--" not in reduced
        assert "-->" not in reduced
        assert "analytics" not in reduced
        assert "promo banner" not in reduced

    def test_is_idempotent(self) -> None:
        once = reduce_markup(_PAGE_HTML)
        assert reduce_markup(once) == once

    def test_idempotent_when_comment_splits_text(self) -> None:
        html = "<p>left <!-- x --> right</p>"
        once = reduce_markup(html)
        assert once == "<p>left right</p>"
        assert reduce_markup(once) == once

    def test_collapses_whitespace_in_text(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<h1>Welcome to the shop</h1>" in reduced
        assert "\n    <main>" not in reduced

    def test_keeps_space_between_inline_elements(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<b>now</b> <i>today</i>" in reduced

    def test_preserves_pre_content(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<pre>  keep\n   this  </pre>" in reduced

    def test_minifies_style(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<style>body{margin : 0;padding: 0}</style>" in reduced

    def test_minifies_script(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert "<script>var a = 1;\nfunction f() {\nreturn a;\n}</script>" in reduced

    def test_keeps_doctype_and_links(self) -> None:
        reduced = reduce_markup(_PAGE_HTML)
        assert reduced.lower().startswith("<!doctype html>")
        assert '<a href="/cart">Cart</a>' in reduced

    def test_external_script_untouched(self) -> None:
        html = '<script src="/app.js"></script><div>x</div>'
        assert reduce_markup(html) == html

    def test_strips_comment_tokens_inside_style(self) -> None:
        reduced = reduce_markup("<style><!-- body { margin: 0 } --></style><p>x</p>")
        assert reduced == "<style>body{margin: 0}</style><p>x</p>"

    def test_keeps_non_breaking_spaces(self) -> None:
        reduced = reduce_markup("<td>&nbsp;</td><p>a&nbsp;&nbsp;b</p>")
        assert reduced == "<td>\xa0</td><p>a\xa0\xa0b</p>"
        assert reduce_markup(reduced) == reduced

    def test_comment_inside_pre_is_removed_and_spacing_kept(self) -> None:
        reduced = reduce_markup("<pre> a <!-- c --> b </pre>")
        assert reduced == "<pre> a  b </pre>"

    def test_comment_inside_textarea(self) -> None:
        reduced = reduce_markup("<textarea>a<!-- c -->b</textarea>")
        assert "<!--" not in reduced
        assert reduce_markup(reduced) == reduced

    def test_idempotent_on_generated_documents(self) -> None:
        snippets = [
            "<p>Hello   world</p>",
            "<b>bold</b>",
            "<i>it</i>",
            " ",
            "\n   ",
            "<!-- note -->",
            "plain  text",
            "&nbsp;",
            "<span>a&nbsp;&nbsp;b</span>",
            "<pre> keep  <!-- x --> this </pre>",
            "<style><!-- p { color : red } --></style>",
            "<script>\n  <!--\n  var x = 1;\n  -->\n</script>",
            "<div>\n  <a href='#'>x</a>\n</div>",
            "<ul><li> one </li>\n<li>two</li></ul>",
        ]
        rng = random.Random(1234)
        for _ in range(300):
            html = "".join(rng.choice(snippets) for _ in range(rng.randint(1, 12)))
            once = reduce_markup(html)
            assert "<!--" not in once, html
            assert "-->" not in once, html
            assert reduce_markup(once) == once, html

    @pytest.mark.parametrize(
        "html",
        [
            "",
            "plain text",
            "<div>\n\n</div>",
            "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>",
            "<p>a &amp; b &lt;tag&gt;</p>",
            "<textarea>  raw   text </textarea>",
        ],
    )
    def test_idempotent_on_edge_cases(self, html: str) -> None:
        once = reduce_markup(html)
        assert reduce_markup(once) == once


# ---------------------------------------------------------------------------
# CapturedMarkup
# ---------------------------------------------------------------------------

def test_captured_markup_joins_in_order() -> None:
    captured = CapturedMarkup(url="https://example.com", fragments=[("A", "<p>1</p>"), ("B", "<p>2</p>")])

    assert captured.devices == ["A", "B"]
    assert captured.joined() == f"<p>1</p>{DEVICE_SEPARATOR}<p>2</p>"


# ---------------------------------------------------------------------------
# load_page
# ---------------------------------------------------------------------------

class TestLoadPage:
    def test_one_fragment_per_device_in_order(self) -> None:
        sync_playwright, pw = _fake_playwright(["<html>desktop</html>", "<html>mobile</html>"])

        with patch("pagegen.scraper.loader.sync_playwright", sync_playwright):
            captured = load_page("https://example.com", ["Desktop Chrome", "iPhone 13"])

        assert captured.url == "https://example.com"
        assert captured.devices == ["Desktop Chrome", "iPhone 13"]
        joined = captured.joined()
        assert joined.split(DEVICE_SEPARATOR) == ["<html>desktop</html>", "<html>mobile</html>"]

    def test_contexts_use_device_descriptors_and_are_closed(self) -> None:
        sync_playwright, pw = _fake_playwright(["a", "b"])
        browser = pw.chromium.launch.return_value

        with patch("pagegen.scraper.loader.sync_playwright", sync_playwright):
            load_page("https://example.com", ["Desktop Chrome", "iPhone 13"])

        pw.chromium.launch.assert_called_once_with(headless=True)
        assert browser.new_context.call_args_list[0].kwargs == pw.devices["Desktop Chrome"]
        assert browser.new_context.call_args_list[1].kwargs == pw.devices["iPhone 13"]
        context = browser.new_context.return_value
        assert context.close.call_count == 2
        context.new_page.return_value.goto.assert_called_with("https://example.com", wait_until="load")
        browser.close.assert_called_once()

    def test_unknown_device_uses_default_context(self) -> None:
        sync_playwright, pw = _fake_playwright(["<html/>"])
        browser = pw.chromium.launch.return_value

        with patch("pagegen.scraper.loader.sync_playwright", sync_playwright):
            captured = load_page("https://example.com", ["Nokia 3310"])

        browser.new_context.assert_called_once_with()
        assert captured.devices == ["Nokia 3310"]

    def test_navigation_failure_propagates_and_cleans_up(self) -> None:
        sync_playwright, pw = _fake_playwright([])
        browser = pw.chromium.launch.return_value
        page = browser.new_context.return_value.new_page.return_value
        page.goto.side_effect = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        with patch("pagegen.scraper.loader.sync_playwright", sync_playwright):
            with pytest.raises(RuntimeError, match="ERR_NAME_NOT_RESOLVED"):
                load_page("https://nope.invalid", ["Desktop Chrome"])

        browser.new_context.return_value.close.assert_called_once()
        browser.close.assert_called_once()
