"""perfsight configuration: threshold sections, profiles and YAML loading."""

from perfsight.config.thresholds import (
    get_thresholds,
    get_active_thresholds,
    get_section,
    list_profiles,
)
from perfsight.config.loader import load_threshold_file, load_config
