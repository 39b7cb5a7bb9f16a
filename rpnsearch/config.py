"""
rpnsearch Configuration

This module provides default settings for expression generation, the
search driver and the bulk sampler, plus logging setup.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional


@dataclass
class GeneratorConfig:
    """Configuration for random expression generation."""
    min_number: int = 1
    max_number: int = 10
    sqrt_probability: float = 0.25


@dataclass
class SearchConfig:
    """Configuration for the search driver."""
    target: float = math.pi
    precision: int = 5
    min_length: int = 10
    max_length: int = 20
    min_number: int = 1
    max_number: int = 100
    workers: int = 10


@dataclass
class SampleConfig:
    """Configuration for bulk sampling."""
    count: int = 1_000_000
    length: int = 5


@dataclass
class RpnSearchConfig:
    """Main configuration for rpnsearch."""
    generator: Optional[GeneratorConfig] = None
    search: Optional[SearchConfig] = None
    sample: Optional[SampleConfig] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.generator is None:
            self.generator = GeneratorConfig()
        if self.search is None:
            self.search = SearchConfig()
        if self.sample is None:
            self.sample = SampleConfig()


# Global configuration instance
_config: Optional[RpnSearchConfig] = None


def get_config() -> RpnSearchConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = RpnSearchConfig()
    return _config


def set_config(config: RpnSearchConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def setup_logging(level: str = "INFO") -> None:
    """Setup logging for rpnsearch."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
