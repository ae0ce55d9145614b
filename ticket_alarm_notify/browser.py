"""
Browser session management for the ticketing provider.
"""
import asyncio
import logging
from typing import Optional, Dict, Any

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError
)

from .errors import SessionNotReady
from .models import SessionConfig

logger = logging.getLogger(__name__)

# Runs inside the page so the request carries the session cookies
FETCH_JSON_SCRIPT = """
async ({ url, headers }) => {
    try {
        const response = await fetch(url, { headers, credentials: 'include' });
        return await response.json();
    } catch (e) {
        return { error: e.message };
    }
}
"""


class BrowserManager:
    """Owns one browser page holding the provider session cookies."""

    def __init__(self, config: SessionConfig):
        """Initialize with session configuration."""
        self.config = config
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.ready = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()

    async def start(self) -> bool:
        """Launch the browser and establish the session.

        A failure is logged and leaves the manager not ready; it is never
        retried for the lifetime of the process.
        """
        try:
            logger.info("🌐 Launching browser...")
            await self.setup()
            logger.info("🔗 Navigating to the provider landing page...")
            await self.navigate(
                self.config.base_url,
                wait_until='networkidle',
                wait_after=self.config.settle_delay
            )
            self.ready = True
            logger.info("✅ Browser ready!")
        except Exception as e:
            logger.error(f"❌ Browser init failed: {e}")
            self.ready = False
        return self.ready

    async def setup(self) -> None:
        """Set up the browser and context."""
        self.playwright = await async_playwright().start()
        launch_options: Dict[str, Any] = {
            'headless': self.config.headless,
            'args': [
                '--disable-blink-features=AutomationControlled',
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
                '--disable-gpu',
                '--no-zygote',
            ],
        }
        # Use a system Chromium if one is configured (e.g. in Docker)
        if self.config.executable_path:
            launch_options['executable_path'] = self.config.executable_path
        self.browser = await self.playwright.chromium.launch(**launch_options)

        self.context = await self.browser.new_context(
            user_agent=self.config.user_agent,
            viewport={'width': self.config.viewport[0], 'height': self.config.viewport[1]},
            java_script_enabled=True,
        )

        await self.context.add_init_script("""
        Object.defineProperty(navigator, 'webdriver', { get: () => false });
        """)

        self.page = await self.context.new_page()
        self.page.set_default_timeout(self.config.timeout * 1000)  # Convert to ms

    async def cleanup(self) -> None:
        """Clean up browser resources."""
        self.ready = False
        if self.page and not self.page.is_closed():
            await self.page.close()
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def navigate(self, url: str, wait_until: str = 'domcontentloaded', wait_after: float = 0) -> None:
        """Navigate to a URL.

        Args:
            url: The URL to navigate to
            wait_until: When to consider navigation succeeded ('load', 'domcontentloaded', 'networkidle')
            wait_after: Additional seconds to wait after page load (default: 0)
        """
        if not self.page:
            raise RuntimeError("Browser not initialized. Call setup() first.")

        await self.page.goto(url, wait_until=wait_until)

        if wait_after > 0:
            logger.debug(f"⏳ Waiting {wait_after} seconds for page to settle...")
            await asyncio.sleep(wait_after)

    async def fetch_json(self, url: str, headers: Dict[str, str]) -> Dict[str, Any]:
        """Fetch a JSON document from inside the page, reusing its cookies.

        Network and decoding failures inside the page come back as
        ``{"error": message}`` rather than raising.
        """
        if not self.ready or not self.page:
            raise SessionNotReady()
        try:
            return await self.page.evaluate(FETCH_JSON_SCRIPT, {'url': url, 'headers': headers})
        except PlaywrightError as e:
            return {'error': str(e)}
