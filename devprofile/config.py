"""
Configuration for the profile builder.

Recorded runtimes live in ``configs/runtimes.yaml``; ``DEVPROFILE_RUNTIMES``
points at a different file and ``DEVPROFILE_RUNTIME`` picks the runtime the
default context is built from.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .platform.report import RuntimeReport

LOG = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
RUNTIMES_PATH = CONFIG_DIR / "runtimes.yaml"
ENV_RUNTIMES_VAR = "DEVPROFILE_RUNTIMES"
ENV_RUNTIME_VAR = "DEVPROFILE_RUNTIME"
DEFAULT_RUNTIME = "generic"

PathLike = Union[str, Path]


class ProfileError(RuntimeError):
    """Base class for profile builder configuration errors."""


class UnknownRuntime(ProfileError):
    """Raised when a runtime name is not present in the runtimes file."""


class InvalidReport(ProfileError):
    """Raised when a runtime report cannot be parsed."""


class ProfileConfig:
    """Top level profile builder configuration."""

    def __init__(self, runtime: Optional[str] = None, runtimes_path: Optional[PathLike] = None) -> None:
        self.runtime = runtime or os.environ.get(ENV_RUNTIME_VAR) or DEFAULT_RUNTIME
        env_path = os.environ.get(ENV_RUNTIMES_VAR)
        if runtimes_path is not None:
            self.runtimes_path = Path(runtimes_path)
        elif env_path:
            self.runtimes_path = Path(env_path).expanduser()
        else:
            self.runtimes_path = RUNTIMES_PATH

    def runtimes(self) -> Dict[str, RuntimeReport]:
        return load_runtimes(self.runtimes_path)

    def report(self, name: Optional[str] = None) -> RuntimeReport:
        return get_runtime(name or self.runtime, self.runtimes_path)


def _parse_report(name: str, payload: object) -> RuntimeReport:
    try:
        return RuntimeReport.model_validate(payload or {})
    except ValidationError as exc:
        raise InvalidReport(f"runtime {name!r} is invalid: {exc}") from exc


def load_runtimes(path: Optional[PathLike] = None) -> Dict[str, RuntimeReport]:
    """
    Read every recorded runtime from ``path``.  A missing file yields no runtimes.
    """

    target = Path(path) if path is not None else RUNTIMES_PATH
    try:
        with target.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        LOG.warning("Runtimes file %s not found", target)
        return {}
    if not isinstance(raw, dict):
        raise InvalidReport(f"{target} must map runtime names to reports")
    return {str(name): _parse_report(str(name), payload) for name, payload in raw.items()}


def get_runtime(name: str, path: Optional[PathLike] = None) -> RuntimeReport:
    runtimes = load_runtimes(path)
    try:
        return runtimes[name]
    except KeyError:
        raise UnknownRuntime(f"unknown runtime {name!r}") from None


def load_report_file(path: PathLike) -> RuntimeReport:
    """
    Load a single report from a JSON or YAML file.
    """

    target = Path(path)
    with target.open("r", encoding="utf-8") as handle:
        try:
            payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise InvalidReport(f"{target} is not valid JSON or YAML: {exc}") from exc
    return _parse_report(target.name, payload)
