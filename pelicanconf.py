import logging

AUTHOR = "Site Author"
SITENAME = "CDN Linked Site"
SITEURL = ""

PATH = "content"

TIMEZONE = "UTC"

DEFAULT_LANG = "en"


def setup_logging(
    log_file_name: str | None = None,
    file_level: int | None = None,
    console_level: int | None = None,
    log_format: str | None = None,
):
    """
    Configure Python's logging module for the build.

    Args:
        log_file_name (str, optional): Log file to write to. No file logging if None.
        file_level (int, optional): File logging level. Defaults to logging.INFO.
        console_level (int, optional): Console logging level. Defaults to logging.INFO.
        log_format (str, optional): Custom log format. If None, uses a default format.

    Returns:
        logging.Logger: Configured root logger
    """

    logging.addLevelName(logging.DEBUG, "🔍")
    logging.addLevelName(logging.INFO, "🆗")
    logging.addLevelName(logging.WARNING, "⚠️ ")
    logging.addLevelName(logging.ERROR, "❌")
    logging.addLevelName(logging.CRITICAL, "🔥")

    if log_format is None:
        log_format = "%(asctime)s.%(msecs)03d %(levelname)s | %(message)s (%(filename)s:%(lineno)d:%(name)s)"
    formatter = logging.Formatter(log_format, datefmt="%H:%M:%S")

    file_level = logging.INFO if file_level is None else file_level
    console_level = logging.INFO if console_level is None else console_level

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file_name:
        file_handler = logging.FileHandler(log_file_name)
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


setup_logging(console_level=logging.INFO)

# Feed generation is usually not desired when developing
FEED_ALL_ATOM = None
CATEGORY_FEED_ATOM = None
TRANSLATION_FEED_ATOM = None
AUTHOR_FEED_ATOM = None
AUTHOR_FEED_RSS = None

DEFAULT_PAGINATION = 10

# Uploaded images and files, served from the CDN on deploy
STATIC_PATHS = ["media", "assets"]

# Plugins
PLUGIN_PATHS = ["plugins"]
PLUGINS = [
    "cdn_linker",
]

# CDN
# Local builds are previews: output keeps pointing at the site itself.
# publishconf.py switches CDN_CONTEXT to "deploy".
CDN_CONTEXT = "preview"
CDN_URL = "https://cdn.example.com/"
CDN_ENABLE_IMAGES = True
CDN_ENABLE_CSS = True
CDN_ENABLE_JS = True
CDN_ENABLE_FONTS = True
CDN_ENABLE_JSON_FEED = False
CDN_ENABLE_XML_FEED = True
CDN_ENABLE_SITEMAP = True
