from __future__ import annotations

from typing import Callable, FrozenSet

from .registry import PluginRegistry


language_plugins = PluginRegistry[FrozenSet[str]]("language")


def register_language(name: str, loader: Callable[[], FrozenSet[str]]) -> None:
    language_plugins.register(name, loader)


def get_language(name: str) -> FrozenSet[str]:
    return language_plugins.get(name)


def available_languages() -> list[str]:
    return language_plugins.names()


__all__ = [
    "PluginRegistry",
    "available_languages",
    "get_language",
    "register_language",
]
