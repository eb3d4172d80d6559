"""Playwright-backed sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout
from playwright.async_api import async_playwright

from .errors import BrowserLaunchError, ElementNotFound, NavigationError, WaitTimeoutError
from .selectors import Selector, SelectorKind
from .session import Session

if TYPE_CHECKING:
    from pathlib import Path

    from playwright.async_api import Browser, BrowserContext, Locator, Page, Playwright

    from .config.main import UiFlowConfig

logger = logging.getLogger(__name__)


def _ms(seconds: float) -> float:
    return max(seconds, 0.0) * 1000


class PlaywrightSession(Session):
    """One browser context and page; the context owns the cookie jar."""

    def __init__(self, context: BrowserContext, page: Page, wait_until: str = "load") -> None:
        self.context = context
        self.page = page
        self.wait_until = wait_until
        self._closed = False

    def _locator(self, selector: Selector) -> Locator:
        root = self.page.locator(selector.within) if selector.within else self.page
        if selector.kind is SelectorKind.ROLE:
            if selector.name is None:
                return root.get_by_role(selector.value)  # type: ignore[arg-type]
            return root.get_by_role(selector.value, name=selector.name)  # type: ignore[arg-type]
        if selector.kind is SelectorKind.TEXT:
            return root.get_by_text(selector.value)
        return root.locator(selector.value)

    async def _visible(self, selector: Selector) -> list[Locator]:
        visible = []
        try:
            for element in await self._locator(selector).all():
                if await element.is_visible():
                    visible.append(element)
        except PlaywrightError as exc:
            # the execution context is torn down while a navigation commits
            logger.debug("Query for %s interrupted: %s", selector, exc.message)
            return []
        return visible

    async def _single_visible(self, selector: Selector) -> Locator:
        visible = await self._visible(selector)
        if not visible:
            raise ElementNotFound("Element disappeared before the action", target=str(selector))
        return visible[0]

    async def goto(self, path: str, timeout: float) -> None:
        try:
            await self.page.goto(path, wait_until=self.wait_until, timeout=_ms(timeout))  # type: ignore[arg-type]
        except PlaywrightTimeout as exc:
            raise WaitTimeoutError(f"Navigation to {path} timed out", target=path, elapsed_s=timeout) from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Navigation to {path} failed: {exc.message}", expected=path, actual=None) from exc

    async def clear_cookies(self) -> None:
        await self.context.clear_cookies()

    async def current_path(self) -> str:
        return urlparse(self.page.url).path or "/"

    async def visible_count(self, selector: Selector) -> int:
        return len(await self._visible(selector))

    async def is_focused(self, selector: Selector) -> bool:
        visible = await self._visible(selector)
        if not visible:
            return False
        try:
            return bool(await visible[0].evaluate("el => el === document.activeElement"))
        except PlaywrightError as exc:
            logger.debug("Focus check for %s interrupted: %s", selector, exc.message)
            return False

    async def fill(self, selector: Selector, value: str, timeout: float) -> None:
        element = await self._single_visible(selector)
        try:
            await element.fill(value, timeout=_ms(timeout))
        except PlaywrightTimeout as exc:
            raise WaitTimeoutError("Fill timed out", target=str(selector), elapsed_s=timeout) from exc
        except PlaywrightError as exc:
            raise ElementNotFound(f"Fill failed: {exc.message}", target=str(selector)) from exc

    async def click(self, selector: Selector, timeout: float) -> None:
        element = await self._single_visible(selector)
        try:
            await element.click(timeout=_ms(timeout))
        except PlaywrightTimeout as exc:
            raise WaitTimeoutError("Click timed out", target=str(selector), elapsed_s=timeout) from exc
        except PlaywrightError as exc:
            raise ElementNotFound(f"Click failed: {exc.message}", target=str(selector)) from exc

    async def content(self) -> str:
        return await self.page.content()

    async def screenshot(self, path: Path) -> Path | None:
        await self.page.screenshot(path=str(path), full_page=True)
        return path

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self.context.close()
        except PlaywrightError as exc:
            logger.debug("Context already gone: %s", exc)


class PlaywrightSessionFactory:
    """Owns the Playwright driver and browser; hands out isolated sessions."""

    def __init__(self, config: UiFlowConfig) -> None:
        self.config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> PlaywrightSessionFactory:
        browser_config = self.config.browser
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=browser_config.headless,
                channel=browser_config.channel,
            )
        except PlaywrightError as exc:
            await self._shutdown()
            raise BrowserLaunchError(f"Could not launch browser: {exc.message}") from exc
        logger.debug("Launched chromium (headless=%s)", browser_config.headless)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self._shutdown()

    async def _shutdown(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as exc:
                logger.debug("Browser already closed: %s", exc)
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def new_session(self) -> PlaywrightSession:
        if self._browser is None:
            raise BrowserLaunchError("Session factory used outside of its context")
        viewport = self.config.browser.viewport
        context = await self._browser.new_context(
            base_url=self.config.project.base_url,
            viewport={"width": viewport.width, "height": viewport.height},
        )
        context.set_default_timeout(_ms(self.config.timeouts.action))
        context.set_default_navigation_timeout(_ms(self.config.timeouts.navigation))
        page = await context.new_page()
        return PlaywrightSession(context, page, wait_until=self.config.hydration.wait_until)
