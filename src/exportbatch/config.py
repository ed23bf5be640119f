from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .models import Job, JobKind


@dataclass(slots=True)
class PathsConfig:
    input: Path
    output: Path
    log: Path | None = None


@dataclass(slots=True)
class BatchConfig:
    max_concurrency: int = 4


@dataclass(slots=True)
class AppConfig:
    paths: PathsConfig
    batch: BatchConfig
    jobs: list[Job]
    executors: dict[str, str] = field(default_factory=dict)


def _require(mapping: dict, key: str, section: str) -> object:
    if key not in mapping:
        raise ValueError(f"Missing `{section}.{key}` in config")
    return mapping[key]


def _parse_kind(value: object) -> JobKind | str:
    text = str(value).strip().lower()
    try:
        return JobKind(text)
    except ValueError:
        return text


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config root must be a mapping")

    paths_raw = _require(raw, "paths", "root")
    batch_raw = raw.get("batch", {})
    executors_raw = raw.get("executors", {})
    jobs_raw = _require(raw, "jobs", "root")

    if not isinstance(paths_raw, dict):
        raise ValueError("`paths` must be a mapping")
    if not isinstance(batch_raw, dict):
        raise ValueError("`batch` must be a mapping")
    if not isinstance(executors_raw, dict):
        raise ValueError("`executors` must be a mapping")
    if not isinstance(jobs_raw, list):
        raise ValueError("`jobs` must be a list")

    def to_path(value: object) -> Path:
        output = Path(str(value)).expanduser()
        if not output.is_absolute():
            output = config_path.parent / output
        return output

    log_raw = paths_raw.get("log")
    paths = PathsConfig(
        input=to_path(_require(paths_raw, "input", "paths")),
        output=to_path(_require(paths_raw, "output", "paths")),
        log=to_path(log_raw) if log_raw else None,
    )

    batch = BatchConfig(max_concurrency=int(batch_raw.get("max_concurrency", 4)))
    if batch.max_concurrency < 1:
        raise ValueError("`batch.max_concurrency` must be >= 1")

    executors: dict[str, str] = {}
    for kind, target in executors_raw.items():
        if not isinstance(target, str) or ":" not in target:
            raise ValueError(f"`executors.{kind}` must be a `module:function` string")
        executors[str(kind).strip().lower()] = target

    jobs: list[Job] = []
    for idx, item in enumerate(jobs_raw):
        if not isinstance(item, dict):
            raise ValueError(f"`jobs[{idx}]` must be a mapping")
        job_config = item.get("config", {}) or {}
        if not isinstance(job_config, dict):
            raise ValueError(f"`jobs[{idx}].config` must be a mapping")
        identifier = str(_require(item, "identifier", f"jobs[{idx}]")).strip()
        if not identifier:
            raise ValueError(f"`jobs[{idx}].identifier` must not be empty")
        jobs.append(
            Job(
                kind=_parse_kind(_require(item, "kind", f"jobs[{idx}]")),
                identifier=identifier,
                config=job_config,
            )
        )

    return AppConfig(paths=paths, batch=batch, jobs=jobs, executors=executors)


def ensure_local_paths(config: AppConfig) -> None:
    config.paths.output.mkdir(parents=True, exist_ok=True)
    if config.paths.log is not None:
        config.paths.log.parent.mkdir(parents=True, exist_ok=True)
