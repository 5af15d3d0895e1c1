"""
Serialization helpers shared by the result dataclasses.
"""

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict

import numpy as np


def to_plain(value: Any) -> Any:
    """Convert a result value into JSON-serializable plain data."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    return value


def label_of(value: Any) -> Any:
    """Plain string of an enum member, or the value itself."""
    return value.value if isinstance(value, Enum) else value


class Serializable:
    """Mixin giving dataclasses a ``to_dict``."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return to_plain(self)
