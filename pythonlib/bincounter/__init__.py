from .counter import BinCounter, MAXINT64
from .merging.merge import merge_counter_list, merge_two_counters
from .config import ConfigError, default_cfg, load_config

__all__ = [name for name in dir() if not name.startswith("_")]
