"""
Data manager for caching the matchup dataset and its aggregation.
"""
import threading
import time
from typing import Optional

from ..analyzer.aggregator import MetaAggregator
from ..config import AggregatorConfig, data_source, load_config
from ..loader.csv_loader import MatchupLoader
from ..loader.models import AggregationResult, ParsedMatchups


class DataManager:
    _instance = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(DataManager, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, source: Optional[str] = None, config: Optional[AggregatorConfig] = None):
        if self._initialized:
            return

        self.source = source
        self._config = config
        self._parsed: Optional[ParsedMatchups] = None
        self._result: Optional[AggregationResult] = None
        self._last_loaded: float = 0
        self._cache_ttl = 300  # 5 minutes
        self._lock = threading.Lock()

        self._initialized = True

    @classmethod
    def reset(cls):
        """Drop the singleton so the next DataManager() starts fresh."""
        cls._instance = None

    @property
    def config(self) -> AggregatorConfig:
        if self._config is None:
            self._config = load_config()
        return self._config

    def get_source(self) -> str:
        if self.source is None:
            self.source = data_source()
        return self.source

    def _expired(self) -> bool:
        return time.time() - self._last_loaded > self._cache_ttl

    def _load(self, force_refresh: bool) -> ParsedMatchups:
        if self._parsed is None or force_refresh or self._expired():
            source = self.get_source()
            print(f"Loading matchup data from {source}... (Force: {force_refresh})")
            loader = MatchupLoader(source)
            self._parsed = loader.load(strict=self.config.strict)
            self._result = None
            self._last_loaded = time.time()
            print(f"Loaded {len(self._parsed.records)} records "
                  f"({self._parsed.skipped} skipped).")
        return self._parsed

    def get_records(self, force_refresh: bool = False) -> ParsedMatchups:
        """Get cached parsed records, reloading if necessary."""
        with self._lock:
            return self._load(force_refresh)

    def get_result(self, force_refresh: bool = False) -> AggregationResult:
        """Get the aggregation of the cached records."""
        with self._lock:
            parsed = self._load(force_refresh)
            if self._result is None:
                aggregator = MetaAggregator(self.config)
                self._result = aggregator.aggregate(parsed.records, skipped_upstream=parsed.skipped)
            return self._result
