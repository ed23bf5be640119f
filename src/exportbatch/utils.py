from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from .models import JobKind, kind_key

UNSAFE_NAME_REGEX = re.compile(r"[^A-Za-z0-9._-]+")

KIND_EXTENSIONS = {
    JobKind.ARCHIVE.value: ".zip",
    JobKind.DOCUMENT.value: ".txt",
    JobKind.IMAGE.value: ".png",
    JobKind.VECTOR.value: ".svg",
}


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def artifact_name(identifier: str, kind: JobKind | str) -> str:
    stem = UNSAFE_NAME_REGEX.sub("_", identifier).strip("._") or "artifact"
    return f"{stem}{KIND_EXTENSIONS.get(kind_key(kind), '.bin')}"


def write_artifact(directory: Path, name: str, payload: bytes) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / name
    stem = destination.stem
    suffix = destination.suffix
    index = 0
    while True:
        try:
            # never overwrites an existing artifact
            with destination.open("xb") as handle:
                handle.write(payload)
            return destination
        except FileExistsError:
            index += 1
            destination = directory / f"{stem}.{index}{suffix}"
