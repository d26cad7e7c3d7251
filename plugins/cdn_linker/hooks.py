"""
Named output hooks for the CDN linker.

Each hook point holds document rewriters ordered by priority. The Pelican
side of the plugin decides which hook a written file belongs to and runs
its rewriters over the file's text.
"""

import logging
from typing import Protocol

from .processor import CDNLinkerConfig, FeedRewriter, HtmlRewriter, RenderContext

_log = logging.getLogger(__name__)

HTML_OUTPUT = "html_output"
FEED_RSS_OUTPUT = "feed_rss_output"
FEED_JSON_OUTPUT = "feed_json_output"
SITEMAP_OUTPUT = "sitemap_output"

HOOKS = (HTML_OUTPUT, FEED_RSS_OUTPUT, FEED_JSON_OUTPUT, SITEMAP_OUTPUT)

# Lower runs first
CDN_PRIORITY = 1


class DocumentRewriter(Protocol):
    def rewrite(self, context: RenderContext, text: str) -> str: ...


class ModifierRegistry:
    """Document rewriters registered against the named output hooks."""

    def __init__(self):
        self._modifiers: dict[str, list[tuple[int, int, DocumentRewriter]]] = {
            hook: [] for hook in HOOKS
        }
        self._counter = 0

    def add_modifier(self, hook: str, rewriter: DocumentRewriter, priority: int = 10):
        """
        Register a rewriter on a hook.

        Args:
            hook: One of HOOKS
            rewriter: Object with a rewrite(context, text) method
            priority: Rewriters with lower priority run first, ties run in
                registration order

        Raises:
            ValueError: If the hook name is unknown
        """
        if hook not in self._modifiers:
            raise ValueError(f"Unknown output hook: {hook}")

        self._counter += 1
        self._modifiers[hook].append((priority, self._counter, rewriter))
        self._modifiers[hook].sort(key=lambda entry: entry[:2])

    def modifiers(self, hook: str) -> list[DocumentRewriter]:
        if hook not in self._modifiers:
            raise ValueError(f"Unknown output hook: {hook}")
        return [rewriter for _, _, rewriter in self._modifiers[hook]]

    def apply(self, hook: str, context: RenderContext, text: str) -> str:
        """Run every rewriter registered on the hook, feeding each the previous output."""
        for rewriter in self.modifiers(hook):
            text = rewriter.rewrite(context, text)
        return text


def add_modifiers(registry: ModifierRegistry, config: CDNLinkerConfig):
    """Register the CDN rewriters on all four output hooks."""
    html_rewriter = HtmlRewriter(config)
    feed_rewriter = FeedRewriter(config)

    registry.add_modifier(HTML_OUTPUT, html_rewriter, CDN_PRIORITY)
    registry.add_modifier(FEED_RSS_OUTPUT, feed_rewriter, CDN_PRIORITY)
    registry.add_modifier(FEED_JSON_OUTPUT, feed_rewriter, CDN_PRIORITY)
    registry.add_modifier(SITEMAP_OUTPUT, feed_rewriter, CDN_PRIORITY)

    _log.debug("Registered CDN rewriters on output hooks")


def hook_for_path(path: str) -> str | None:
    """
    Pick the output hook for a written file.

    Args:
        path: Path of the generated file

    Returns:
        The hook name, or None if the file is not a document the hooks handle
    """
    name = path.lower()
    if name.endswith((".html", ".htm")):
        return HTML_OUTPUT
    if name.endswith("sitemap.xml"):
        return SITEMAP_OUTPUT
    if name.endswith(".json"):
        return FEED_JSON_OUTPUT
    if name.endswith((".xml", ".rss", ".atom")):
        return FEED_RSS_OUTPUT
    return None
