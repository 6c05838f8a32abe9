from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass
class SearchConfig:
    """Tunable knobs of the Monte Carlo search.

    ``exploration`` and ``prior_scale`` are the ``C`` and ``k`` constants of the
    selection formula. ``time_limit_ms`` is the per-turn budget used when the
    caller does not pass one explicitly.
    """

    exploration: float = 20.0
    prior_scale: float = 0.00005
    epsilon: float = 1e-9
    time_limit_ms: int = 2000
    max_iterations: Optional[int] = None
    seed: Optional[int] = None
    shuffle_children: bool = False
    eval_cache_size: int = 100_000

    def __post_init__(self) -> None:
        if self.epsilon <= 0:
            raise ValueError("epsilon must be positive")
        if self.time_limit_ms < 0:
            raise ValueError("time_limit_ms must be >= 0")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError("max_iterations must be >= 0")
        if self.eval_cache_size < 0:
            raise ValueError("eval_cache_size must be >= 0")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], prefix: str = "") -> "SearchConfig":
        """Build a config from ``PREFIX_FIELD`` keys, e.g. a Flask ``app.config``.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        kwargs = {}
        for f in fields(cls):
            key = f"{prefix}{f.name.upper()}"
            if key in mapping and mapping[key] is not None:
                kwargs[f.name] = mapping[key]
        try:
            return cls(**_coerce(kwargs))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid search configuration: {exc}") from exc


def _coerce(kwargs: dict) -> dict:
    out = dict(kwargs)
    for name in ("exploration", "prior_scale", "epsilon"):
        if name in out:
            out[name] = float(out[name])
    for name in ("time_limit_ms", "max_iterations", "seed", "eval_cache_size"):
        if name in out:
            out[name] = int(out[name])
    if "shuffle_children" in out and isinstance(out["shuffle_children"], str):
        out["shuffle_children"] = out["shuffle_children"].lower() in ("1", "true", "yes", "on")
    return out
