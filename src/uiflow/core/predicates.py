"""Predicates over live UI state, evaluated by polling."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .selectors import Selector, SelectorKind

if TYPE_CHECKING:
    from .session import Session

Check = Callable[["Session"], Awaitable[bool]]


@dataclass(frozen=True)
class Predicate:
    description: str
    check: Check

    async def __call__(self, session: Session) -> bool:
        return await self.check(session)


def _text_selector(text: str, within: str | None) -> Selector:
    return Selector(SelectorKind.TEXT, text, within=within)


def visible(selector: str | Selector) -> Predicate:
    target = Selector.parse(selector)

    async def _check(session: Session) -> bool:
        return await session.visible_count(target) > 0

    return Predicate(f"{target} is visible", _check)


def hidden(selector: str | Selector) -> Predicate:
    target = Selector.parse(selector)

    async def _check(session: Session) -> bool:
        return await session.visible_count(target) == 0

    return Predicate(f"{target} is hidden", _check)


def text_visible(text: str, within: str | None = None) -> Predicate:
    return visible(_text_selector(text, within))


def text_hidden(text: str, within: str | None = None) -> Predicate:
    return hidden(_text_selector(text, within))


def focused(selector: str | Selector) -> Predicate:
    target = Selector.parse(selector)

    async def _check(session: Session) -> bool:
        return await session.is_focused(target)

    return Predicate(f"{target} is focused", _check)


def url_is(path: str) -> Predicate:
    async def _check(session: Session) -> bool:
        return await session.current_path() == path

    return Predicate(f"url == {path}", _check)


def all_of(*predicates: Predicate) -> Predicate:
    async def _check(session: Session) -> bool:
        for predicate in predicates:
            if not await predicate(session):
                return False
        return True

    return Predicate(" and ".join(p.description for p in predicates), _check)
