"""
CDN Linker Plugin for Pelican

Rewrites asset URLs in generated HTML, feeds and sitemaps so static assets are
served from a CDN instead of the site itself. Only runs for deploy builds.

This plugin:
1. Builds its configuration from the CDN_* settings when Pelican starts
2. Rewrites src/href/srcset URLs of enabled asset types in every HTML page
3. Rewrites <SITEURL>/media/ links in feed.xml, feed.json and sitemap.xml
4. Picks up feed.json and sitemap.xml written by other plugins once the build
   has finished

Usage:
    Add 'cdn_linker' to PLUGINS and set CDN_URL in publishconf.py. Set
    CDN_CONTEXT = "preview" in pelicanconf.py to keep local builds untouched.

Environment Variables:
    CDN_LINKER_URL: Overrides CDN_URL
    CDN_LINKER_ENABLED: Set to "false" to disable rewriting
    CDN_LINKER_CONTEXT: Overrides CDN_CONTEXT ("deploy", "preview" or "instant-preview")
"""

import logging
from pathlib import Path

from pelican import signals

from .hooks import FEED_RSS_OUTPUT, ModifierRegistry, add_modifiers, hook_for_path
from .processor import PREVIEW_MODES, RenderContext
from .settings import load_config, load_mode

_log = logging.getLogger(__name__)

# Global linker instance for the current Pelican run
_linker = None


class CDNLinker:
    """Applies the output hooks to files in Pelican's output directory."""

    def __init__(self, settings: dict, output_path: str):
        """
        Initialize the linker.

        Args:
            settings: Pelican settings
            output_path: Path to Pelican's output directory
        """
        self.output_path = Path(output_path)
        self.config = load_config(settings)
        self.mode = load_mode(settings)
        self.site_url = settings.get("SITEURL") or None
        self.registry = ModifierRegistry()
        add_modifiers(self.registry, self.config)
        # Paths already rewritten in the current build, cleared on finalized
        self.processed: set[Path] = set()

    def context_for(self, path: Path) -> RenderContext:
        try:
            file_name = path.resolve().relative_to(self.output_path.resolve()).as_posix()
        except ValueError:
            file_name = path.as_posix()
        return RenderContext(mode=self.mode, file_name=file_name, site_url=self.site_url)

    def rewrite_file(self, path, hook: str | None = None) -> bool:
        """
        Run the hook's rewriters over a generated file.

        Args:
            path: Path of the generated file
            hook: Output hook to apply. Guessed from the file name if not given.

        Returns:
            True if the file was changed
        """
        path = Path(path).resolve()
        hook = hook or hook_for_path(path.name)
        if hook is None or path in self.processed:
            return False
        self.processed.add(path)

        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        context = self.context_for(path)
        new_content = self.registry.apply(hook, context, content)
        if new_content == content:
            return False

        with open(path, "w", encoding="utf-8") as f:
            f.write(new_content)
        _log.info(f"[CDN Linker] Rewrote asset URLs in {context.file_name}")
        return True

    def rewrite_remaining(self) -> int:
        """Rewrite feed.json and sitemap.xml files not written through Pelican's Writer."""
        count = 0
        for pattern in ("*feed.json", "*sitemap.xml"):
            for path in sorted(self.output_path.rglob(pattern)):
                if self.rewrite_file(path):
                    count += 1
        return count


def get_linker():
    return _linker


def initialize_linker(pelican):
    """
    Create the CDNLinker for this run.

    Args:
        pelican: The Pelican instance
    """
    global _linker
    _linker = CDNLinker(pelican.settings, pelican.output_path)

    if not _linker.config.cdn_url:
        _log.info("[CDN Linker] CDN_URL is not set, output will not be rewritten")
    elif _linker.mode in PREVIEW_MODES:
        _log.info(f"[CDN Linker] {_linker.mode} build, output will not be rewritten")
    else:
        _log.info(f"[CDN Linker] Rewriting asset URLs to {_linker.config.cdn_url}")


def _safe_rewrite(path, hook=None):
    if _linker is None:
        return
    try:
        _linker.rewrite_file(path, hook)
    except Exception:
        _log.exception(f"[CDN Linker] Error rewriting {path}")


def process_content_written(path, context=None):
    """Handle pages (and any feed or sitemap) written by Pelican's Writer."""
    _safe_rewrite(path)


def process_feed_written(path, context=None, feed=None):
    """Handle Atom/RSS feeds written by Pelican's Writer."""
    _safe_rewrite(path, FEED_RSS_OUTPUT)


def process_finalized(pelican):
    """
    Rewrite the JSON feeds and sitemaps that other plugins wrote.

    This runs after all content has been written to the output directory.

    Args:
        pelican: The Pelican instance
    """
    if _linker is None:
        return
    try:
        count = _linker.rewrite_remaining()
        if count:
            _log.info(f"[CDN Linker] Rewrote {count} additional feed/sitemap file(s)")
    except Exception:
        _log.exception("[CDN Linker] Error rewriting feeds and sitemaps")
    finally:
        # Autoreload runs the next build on the same linker
        _linker.processed.clear()


def register():
    """
    Plugin registration - required by Pelican.

    Connects the linker to the write signals for each generated document and to
    the finalized signal for files generated outside Pelican's Writer.
    """
    signals.initialized.connect(initialize_linker)
    signals.content_written.connect(process_content_written)
    signals.feed_written.connect(process_feed_written)
    signals.finalized.connect(process_finalized)
