"""Dot-path configuration layer for the completion client.

Goals
-----
* Centralize defaults (pool size, cache sizes and TTLs, stream ceilings).
* Merge sources in a predictable order:
    1. Built-in defaults (:mod:`completion_stream.config.defaults`)
    2. Optional external config file (JSON or YAML) pointed to by
       ``COMPLETION_CONFIG_FILE``
    3. Environment variables: ``COMPLETION__POOL__MAXSIZE=8`` sets
       ``pool.maxSize`` (double underscore separates path segments, segment
       matching is case-insensitive against known keys)
    4. In-code overrides passed to :class:`Settings`
* Provide a single lookup: ``settings.get("stream.ceilings.chat")``. A
  ``Settings`` instance is callable, so it can be handed to anything expecting
  a ``get_config(path) -> value`` function.

External Config File (Optional)
-------------------------------
```
models:
  chat:
    endpoint: http://localhost:5000/v1
    apiKey: ${TABBY_API_KEY}
    model: Qwen2.5-32B-Instruct
    modelType: qwen2
    maxTokens: 512
stream:
  ceilings:
    tool: 40000
```
``${VAR}`` references in string values are expanded from the environment.
"""
from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .defaults import DEFAULTS

CONFIG_FILE_ENV = "COMPLETION_CONFIG_FILE"
ENV_PREFIX = "COMPLETION__"

_MISSING = object()


def _deep_merge(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``other`` into ``base`` (in place) and return it."""
    for key, value in other.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def load_config_file(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """Load a JSON or YAML mapping from ``path``; missing files yield ``{}``.

    JSON is attempted first, YAML second. A document that is not a mapping
    is treated as empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"{p}: not valid JSON or YAML ({exc})") from exc
    if not isinstance(data, dict):
        return {}
    return _expand_env(data)


def _coerce_env_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _env_overrides(environ: Mapping[str, str], reference: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate ``COMPLETION__A__B=v`` variables into a nested mapping."""
    out: Dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [s for s in name[len(ENV_PREFIX):].split("__") if s]
        if not segments:
            continue
        node_out = out
        node_ref: Any = reference
        for i, seg in enumerate(segments):
            key = seg.lower()
            if isinstance(node_ref, Mapping):
                key = next((k for k in node_ref if k.lower() == seg.lower()), key)
                node_ref = node_ref.get(key)
            else:
                node_ref = None
            if i == len(segments) - 1:
                node_out[key] = _coerce_env_value(raw)
            else:
                node_out = node_out.setdefault(key, {})
    return out


class Settings:
    """Merged, read-only view over defaults, file, environment and overrides."""

    def __init__(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        env = os.environ if environ is None else environ
        data = copy.deepcopy(DEFAULTS)
        path = config_file or env.get(CONFIG_FILE_ENV)
        if path:
            _deep_merge(data, load_config_file(path))
        _deep_merge(data, _env_overrides(env, data))
        if overrides:
            _deep_merge(data, overrides)
        self._data = data

    def get(self, path: str, default: Any = None) -> Any:
        """Return the value at dot-separated ``path`` or ``default``."""
        node: Any = self._data
        for part in path.split("."):
            if not isinstance(node, Mapping):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return copy.deepcopy(node)

    def get_int(self, path: str, default: int) -> int:
        value = self.get(path, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_float(self, path: str, default: float) -> float:
        value = self.get(path, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def __call__(self, path: str) -> Any:
        return self.get(path)

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


__all__ = ["Settings", "load_config_file", "CONFIG_FILE_ENV", "ENV_PREFIX"]
