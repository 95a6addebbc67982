from .logger import setup_logging
from .answers import fold_keys, get_bool, get_list, get_str
from .formatting import money, weeks_label

__all__ = ["setup_logging", "fold_keys", "get_bool", "get_list", "get_str", "money", "weeks_label"]
