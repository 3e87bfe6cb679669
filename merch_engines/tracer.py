"""
merch_engines.tracer -- MERCH_ENGINE_TRACE records for engine calls.

Wraps an engine function so that every call logs one structured record:
which engine ran, at which version, how long it took and a short hash of
the inputs that matter.  Two calls with equal inputs log the same
``input_fingerprint``, which lets a quote be tied back to the exact
deliverables it was priced from.

Invariants enforced:
    - The fingerprint depends only on argument values: dict key order,
      trailing Decimal zeros and enum identity do not change it.
    - Tracing never alters the return value.  One-shot iterators passed
      as fingerprinted arguments are read once into a tuple, and the
      tuple is what the engine receives.

Usage:
    @traced_engine("pricing", "1.0", fingerprint_fields=("deliverables",))
    def price_all(deliverables, catalog, rates): ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Iterator
from decimal import Decimal
from enum import Enum
from typing import Any

from merch_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "MERCH_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _stable_repr(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return str(value.normalize()) if value else "0"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, int, float)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = ",".join(
            f"{f.name}:{_stable_repr(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
            if f.init
        )
        return f"{type(value).__name__}({fields})"
    if isinstance(value, dict):
        entries = sorted((str(k), _stable_repr(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in entries) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(_stable_repr, value)) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """Short SHA-256 hex digest of the named arguments. Absent names hash as null."""
    canonical = "|".join(
        f"{name}={_stable_repr(arguments.get(name))}" for name in fingerprint_fields
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def _emit_trace(
    func: Callable,
    engine_name: str,
    engine_version: str,
    fingerprint: str,
    started: float,
) -> None:
    _logger.info(TRACE_TYPE, extra={
        "trace_type": TRACE_TYPE,
        "engine_name": engine_name,
        "engine_version": engine_version,
        "input_fingerprint": fingerprint,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "function": func.__qualname__,
    })


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable], Callable]:
    """
    Decorator factory for traced engine entrypoints.

    ``fingerprint_fields`` names the parameters (passed positionally or by
    keyword) that feed the input fingerprint. With none, the fingerprint
    is an empty string.
    """

    def decorate(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def traced(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                for name in fingerprint_fields:
                    if isinstance(bound.arguments.get(name), Iterator):
                        bound.arguments[name] = tuple(bound.arguments[name])
                args, kwargs = bound.args, bound.kwargs
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            _emit_trace(func, engine_name, engine_version, fingerprint, started)
            return result

        return traced

    return decorate
