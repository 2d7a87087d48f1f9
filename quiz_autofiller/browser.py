"""
Browser Session
Owns the Playwright browser and the single page a quiz run drives
"""
from typing import Optional

from loguru import logger
from playwright.async_api import async_playwright, Browser, Page
from tenacity import retry, stop_after_attempt, wait_exponential


class BrowserSession:
    """
    Launches Chromium with Playwright and hands out one page.

    Use as `async with BrowserSession() as page: ...`.
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self.browser: Optional[Browser] = None
        self.playwright = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> Page:
        browser = await self.get_browser()
        self.page = await browser.new_page()
        return self.page

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True
    )
    async def get_browser(self) -> Browser:
        """Get or create Playwright browser instance"""
        if not self.browser:
            if not self.playwright:
                self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                    '--disable-dev-shm-usage',
                    '--disable-gpu'
                ]
            )
            logger.info(f"Playwright browser launched (headless={self.headless})")
        return self.browser

    async def cleanup(self):
        """Clean up browser resources"""
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None
        logger.info("Browser session closed")
