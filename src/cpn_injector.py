import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Page

from src.config import Config

logger = logging.getLogger(__name__)

FORCE_CPN_SCRIPT = "() => { ENV['FORCE_CPN'] = true; }"


class CPNInjector:
    """Loads the CPN script and stylesheet into a live Canvas page."""

    def __init__(self, script_path: Optional[Union[str, Path]] = None,
                 style_path: Optional[Union[str, Path]] = None):
        self.script_path = Path(script_path or Config.CPN_SCRIPT_PATH)
        self.style_path = Path(style_path or Config.CPN_STYLE_PATH)

    def check_assets(self) -> None:
        """Raise FileNotFoundError if either asset is missing."""
        for path in (self.script_path, self.style_path):
            if not path.is_file():
                raise FileNotFoundError(f"CPN asset not found: {path}")

    async def inject(self, page: Page) -> None:
        """Force CPN on and attach its script and stylesheet.

        The flag must be set before the script runs, the two tags are
        added concurrently.
        """
        self.check_assets()
        await page.evaluate(FORCE_CPN_SCRIPT)
        await asyncio.gather(
            page.add_script_tag(path=str(self.script_path)),
            page.add_style_tag(path=str(self.style_path))
        )
        logger.debug(f"Injected {self.script_path.name} into {page.url}")
