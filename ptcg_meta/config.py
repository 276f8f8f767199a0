"""
Aggregation settings and environment overrides.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


DEFAULT_DATA_SOURCE = "data/matchups.csv"
ENV_PREFIX = "PTCG_META_"


@dataclass(frozen=True)
class AggregatorConfig:
    """Thresholds and weights used by MetaAggregator."""
    min_matchup_games: int = 10     # records below this are left out of the statistics
    min_deck_games: int = 50        # decks below this are left out of the ranking
    favorable_above: float = 52.0
    unfavorable_below: float = 48.0
    weight_win_rate: float = 0.5
    weight_meta_share: float = 0.3
    weight_favorable: float = 2.0
    insight_size: int = 5
    strict: bool = False

    def validate(self) -> "AggregatorConfig":
        """Raise ConfigurationError if any setting is unusable."""
        for name in ("min_matchup_games", "min_deck_games"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")

        for name in ("weight_win_rate", "weight_meta_share", "weight_favorable"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")

        for name in ("favorable_above", "unfavorable_below"):
            if not 0 <= getattr(self, name) <= 100:
                raise ConfigurationError(f"{name} must be between 0 and 100")
        if self.unfavorable_below > self.favorable_above:
            raise ConfigurationError(
                "unfavorable_below must not be greater than favorable_above"
            )

        if isinstance(self.insight_size, bool) or not isinstance(self.insight_size, int) \
                or self.insight_size < 1:
            raise ConfigurationError("insight_size must be a positive integer")
        return self


def _coerce(name: str, raw: str, kind: type):
    text = raw.strip()
    try:
        if kind is bool:
            lowered = text.lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off", ""):
                return False
            raise ValueError(text)
        return kind(text)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name.upper()} has an invalid value: {raw!r}") from None


def _environment(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    if env is not None:
        return env
    load_dotenv()
    return os.environ


def load_config(env: Optional[Mapping[str, str]] = None, **overrides) -> AggregatorConfig:
    """
    Build an AggregatorConfig from PTCG_META_* environment variables.

    Args:
        env: Mapping to read instead of the process environment (and .env file)
        overrides: Explicit values that win over the environment; None is ignored

    Raises:
        ConfigurationError: if a value cannot be parsed or fails validation
    """
    env = _environment(env)
    config = AggregatorConfig()
    values = {}
    for f in fields(AggregatorConfig):
        raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None:
            values[f.name] = _coerce(f.name, raw, type(getattr(config, f.name)))
    values.update({k: v for k, v in overrides.items() if v is not None})
    return replace(config, **values).validate()


def data_source(env: Optional[Mapping[str, str]] = None) -> str:
    """Path or URL of the matchup CSV."""
    return _environment(env).get(f"{ENV_PREFIX}DATA") or DEFAULT_DATA_SOURCE
