"""
CDN Linker Processor

Handles the URL detection and rewriting logic. Everything in here works on
strings only: the Pelican side of the plugin reads the output files, hands the
text over together with a RenderContext, and writes back whatever comes out.

Matching is done with regular expressions over the raw markup rather than a
parsed document. Only quoted src/href/srcset values are touched, so markup that
is malformed or quoted in an unusual way is skipped instead of rewritten.
"""

import logging
import re
from dataclasses import dataclass

_log = logging.getLogger(__name__)

DEPLOY = "deploy"
PREVIEW = "preview"
INSTANT_PREVIEW = "instant-preview"
PREVIEW_MODES = {PREVIEW, INSTANT_PREVIEW}

FONT_EXTENSIONS = ("woff", "woff2", "ttf", "otf", "eot", "svg")

# Attribute name, opening quote, value. The closing quote has to be the same
# character as the opening one.
ATTRIBUTE_PATTERN = re.compile(r"""(src|href|srcset)=(["'])([^"']+)\2""")

# Optional scheme://host (or //host) prefix followed by the path
URL_PATH_PATTERN = re.compile(r"(?:(?:https?:)?//[^/]+)?(/.+)")


@dataclass(frozen=True)
class CDNLinkerConfig:
    """Options for one rewriting session. An empty cdn_url disables rewriting."""

    cdn_url: str = ""
    enable_images: bool = False
    enable_css: bool = False
    enable_js: bool = False
    enable_fonts: bool = False
    enable_json_feed: bool = False
    enable_xml_feed: bool = False
    enable_sitemap: bool = False


@dataclass(frozen=True)
class RenderContext:
    """The rendering pass a document belongs to."""

    mode: str
    file_name: str = ""
    site_url: str | None = None

    @property
    def is_deploy(self) -> bool:
        return self.mode not in PREVIEW_MODES


def clean_domain(url: str) -> str:
    """
    Reduce a CDN URL to a bare domain.

    Strips a leading http://, https:// or // and then a single trailing slash.

    Args:
        url: The configured CDN URL, e.g. "https://cdn.example.com/"

    Returns:
        The domain (and any path prefix), e.g. "cdn.example.com"
    """
    domain = re.sub(r"^(?:https?:)?//", "", url)
    return re.sub(r"/$", "", domain)


def protocol_of(url: str) -> str:
    """Return "https://" for https URLs and "http://" for anything else."""
    return "https://" if url.startswith("https://") else "http://"


def escape_for_literal_match(text: str) -> str:
    """Escape regex metacharacters so the text matches only itself."""
    return re.escape(text)


def build_patterns(config: CDNLinkerConfig) -> list[str]:
    """
    Build the regex fragments for the enabled asset categories.

    Directory based fragments (/media/) and extension based fragments
    (/assets/ or /themes/ plus an extension) are kept separate, so fonts can be
    enabled without CSS and the other way round.

    Args:
        config: The CDN linker configuration

    Returns:
        List of regex fragments, empty when nothing is enabled
    """
    patterns = []

    if config.enable_images:
        patterns.append(r"/media/")

    extensions = []
    if config.enable_css:
        extensions.append("css")
    if config.enable_js:
        extensions.append("js")
    if config.enable_fonts:
        extensions.extend(FONT_EXTENSIONS)

    if extensions:
        patterns.append(
            rf"(?:/assets/|/themes/).*\.(?:{'|'.join(extensions)})(?:\?[^\"']*)?$"
        )

    if config.enable_json_feed:
        patterns.append(r"feed\.json")
    if config.enable_xml_feed:
        patterns.append(r"feed\.xml")

    return patterns


def build_matcher(config: CDNLinkerConfig) -> re.Pattern | None:
    """Combine the fragments into one pattern, or None if there is nothing to match."""
    patterns = build_patterns(config)
    if not patterns:
        return None
    return re.compile(f"(?:{'|'.join(patterns)})")


class HtmlRewriter:
    """Rewrites asset URLs in src, href and srcset attributes of HTML output."""

    def __init__(self, config: CDNLinkerConfig):
        self.config = config

    def rewrite(self, context: RenderContext, html: str) -> str:
        """
        Point matching asset URLs in the HTML at the CDN.

        Args:
            context: The current rendering pass
            html: The generated HTML

        Returns:
            HTML with CDN URLs, or the input unchanged when rewriting does not apply
        """
        if not context.is_deploy or not self.config.cdn_url:
            return html

        matcher = build_matcher(self.config)
        if matcher is None:
            return html

        cdn_domain = clean_domain(self.config.cdn_url)
        rewritten = 0

        def replace_attribute(match):
            nonlocal rewritten
            attribute, value = match.group(1), match.group(3)

            if attribute == "srcset":
                new_value = self._rewrite_srcset(value, matcher, cdn_domain)
            else:
                new_value = self.rewrite_url(value, matcher, cdn_domain)

            if new_value == value:
                return match.group(0)

            rewritten += 1
            return f'{attribute}="{new_value}"'

        result = ATTRIBUTE_PATTERN.sub(replace_attribute, html)
        if rewritten:
            _log.debug(f"Rewrote {rewritten} attribute(s) in {context.file_name or 'document'}")
        return result

    @staticmethod
    def rewrite_url(url: str, matcher: re.Pattern, cdn_domain: str) -> str:
        """
        Rewrite a single URL to the CDN domain.

        Only URLs starting with "http" or "/" that match one of the enabled
        asset patterns are touched. Root-relative URLs get "http://".

        Args:
            url: The URL from the attribute value
            matcher: Combined asset pattern from build_matcher()
            cdn_domain: The CDN domain as returned by clean_domain()

        Returns:
            The CDN URL, or the input unchanged
        """
        if not (url.startswith("http") or url.startswith("/")):
            return url
        if not matcher.search(url):
            return url

        path_match = URL_PATH_PATTERN.search(url)
        if not path_match:
            return url

        return f"{protocol_of(url)}{cdn_domain}{path_match.group(1)}"

    def _rewrite_srcset(self, value: str, matcher: re.Pattern, cdn_domain: str) -> str:
        candidates = []
        changed = False
        for candidate in value.split(","):
            parts = candidate.split()
            if not parts:
                candidates.append("")
                continue
            url, descriptors = parts[0], parts[1:]
            new_url = self.rewrite_url(url, matcher, cdn_domain)
            changed = changed or new_url != url
            candidates.append(" ".join([new_url, *descriptors]))

        # Keep the original spacing unless a URL actually changed
        if not changed:
            return value
        return ", ".join(candidates)


class FeedRewriter:
    """Rewrites <site-url>/media/ links in XML feeds, JSON feeds and sitemaps."""

    def __init__(self, config: CDNLinkerConfig):
        self.config = config

    def applies_to(self, file_name: str) -> bool:
        """Check the file name suffix against the feed and sitemap toggles."""
        if file_name.endswith("feed.xml"):
            return self.config.enable_xml_feed
        if file_name.endswith("feed.json"):
            return self.config.enable_json_feed
        if file_name.endswith("sitemap.xml"):
            return self.config.enable_sitemap
        return False

    def rewrite(self, context: RenderContext, content: str) -> str:
        """
        Replace media links under the site URL with CDN links.

        The CDN protocol follows the site URL's protocol.

        Args:
            context: The current rendering pass, site_url is required
            content: Feed or sitemap text

        Returns:
            Content with CDN media URLs, or the input unchanged when rewriting does not apply
        """
        if not context.is_deploy or not self.config.cdn_url or not context.site_url:
            return content

        if not self.applies_to(context.file_name):
            return content

        site_url = re.sub(r"/$", "", context.site_url)
        cdn_media_url = f"{protocol_of(site_url)}{clean_domain(self.config.cdn_url)}/media/"
        media_pattern = re.compile(f"{escape_for_literal_match(site_url)}/media/")

        result, count = media_pattern.subn(lambda _: cdn_media_url, content)
        if count:
            _log.debug(f"Rewrote {count} media link(s) in {context.file_name}")
        return result
