from __future__ import annotations

import importlib
from collections.abc import Awaitable, Callable, Iterator
from typing import Any, Union

from .errors import DuplicateExecutorError, RegistryClosedError, UnknownKindError
from .models import JobKind, kind_key

ExecutorResult = Union[bytes, bytearray, memoryview]
Executor = Callable[[Any, Any], Union[ExecutorResult, Awaitable[ExecutorResult]]]


def load_executor(path: str) -> Executor:
    """Import an executor from a ``"package.module:function"`` path."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Executor path must look like `module:function`, got {path!r}")
    module = importlib.import_module(module_name)
    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part)
    if not callable(target):
        raise TypeError(f"Executor {path!r} is not callable")
    return target


class ExecutorRegistry:
    def __init__(self) -> None:
        self._executors: dict[str, Executor] = {}
        self._closed = False

    def register(self, kind: JobKind | str, executor: Executor) -> None:
        if self._closed:
            raise RegistryClosedError("registry snapshot is read-only")
        if not callable(executor):
            raise TypeError(f"executor for {kind_key(kind)!r} must be callable")
        key = kind_key(kind)
        if key in self._executors:
            raise DuplicateExecutorError(key)
        self._executors[key] = executor

    def register_path(self, kind: JobKind | str, path: str) -> None:
        self.register(kind, load_executor(path))

    def resolve(self, kind: JobKind | str) -> Executor:
        key = kind_key(kind)
        try:
            return self._executors[key]
        except KeyError:
            raise UnknownKindError(key) from None

    def kinds(self) -> list[str]:
        return sorted(self._executors)

    def snapshot(self) -> ExecutorRegistry:
        frozen = ExecutorRegistry()
        frozen._executors = dict(self._executors)
        frozen._closed = True
        return frozen

    @property
    def closed(self) -> bool:
        return self._closed

    def __contains__(self, kind: object) -> bool:
        if not isinstance(kind, (JobKind, str)):
            return False
        return kind_key(kind) in self._executors

    def __iter__(self) -> Iterator[str]:
        return iter(self.kinds())

    def __len__(self) -> int:
        return len(self._executors)
