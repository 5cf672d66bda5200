import gettext
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DOMAIN = "box_annotation"
LOCALE_DIR = Path(__file__).parent.parent / "i18n"


def install_translations(domain: str = DOMAIN, locale_dir: Path = LOCALE_DIR):
    """
    Route every `gettext(...)` call of the package to `domain`.

    Messages without a catalog for the current locale are shown untranslated.
    """
    gettext.bindtextdomain(domain, localedir=str(locale_dir))
    gettext.textdomain(domain)
    logger.debug('Loading locale data for "%s" from "%s"', domain, locale_dir)


install_translations()
