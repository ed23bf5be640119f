from __future__ import annotations

import io
import zipfile
from collections.abc import Mapping
from typing import Any

from .models import JobKind
from .registry import ExecutorRegistry


def _input_bytes(shared_input: Any) -> bytes:
    if isinstance(shared_input, str):
        return shared_input.encode("utf-8")
    if isinstance(shared_input, (bytes, bytearray, memoryview)):
        return bytes(shared_input)
    raise TypeError(f"shared input must be bytes or str, got {type(shared_input).__name__}")


def export_archive(shared_input: Any, config: Mapping[str, Any]) -> bytes:
    entry_name = str(config.get("entry_name", "input.bin"))
    compresslevel = int(config.get("compresslevel", 6))
    if not 0 <= compresslevel <= 9:
        raise ValueError("`compresslevel` must be between 0 and 9")
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compresslevel) as archive:
        archive.writestr(entry_name, _input_bytes(shared_input))
    return buffer.getvalue()


def export_document(shared_input: Any, config: Mapping[str, Any]) -> bytes:
    encoding = str(config.get("encoding", "utf-8"))
    line_ending = str(config.get("line_ending", "\n"))
    if line_ending not in {"\n", "\r\n"}:
        raise ValueError("`line_ending` must be LF or CRLF")
    if isinstance(shared_input, str):
        text = shared_input
    else:
        text = _input_bytes(shared_input).decode(encoding)

    lines: list[str] = []
    title = config.get("title")
    if title:
        lines.extend([str(title), "=" * len(str(title)), ""])
    lines.extend(text.splitlines())
    return (line_ending.join(lines) + line_ending).encode(encoding)


def default_registry() -> ExecutorRegistry:
    registry = ExecutorRegistry()
    registry.register(JobKind.ARCHIVE, export_archive)
    registry.register(JobKind.DOCUMENT, export_document)
    return registry
