from __future__ import annotations


class ExportBatchError(RuntimeError):
    pass


class UnknownKindError(ExportBatchError, LookupError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"no executor registered for kind {kind!r}")
        self.kind = kind


class DuplicateExecutorError(ExportBatchError, ValueError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"executor already registered for kind {kind!r}")
        self.kind = kind


class RegistryClosedError(ExportBatchError):
    pass
