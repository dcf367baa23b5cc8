from __future__ import annotations

from typing import Callable, Dict, Generic, List, TypeVar


T = TypeVar("T")


class PluginRegistry(Generic[T]):
    """Name-to-loader mapping whose loaded values are cached on first use."""

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._loaders: Dict[str, Callable[[], T]] = {}
        self._loaded: Dict[str, T] = {}

    def register(self, name: str, loader: Callable[[], T]) -> None:
        if name in self._loaders:
            raise ValueError(f"{self._kind.capitalize()} '{name}' is already registered.")
        self._loaders[name] = loader

    def get(self, name: str) -> T:
        if name not in self._loaded:
            try:
                loader = self._loaders[name]
            except KeyError as exc:
                raise KeyError(f"Unknown or unsupported {self._kind} '{name}'.") from exc
            self._loaded[name] = loader()
        return self._loaded[name]

    def __contains__(self, name: object) -> bool:
        return name in self._loaders

    def names(self) -> List[str]:
        return sorted(self._loaders.keys())
