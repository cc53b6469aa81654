from .config_data import InstallationConfig
from .config_loader import load_config, merge_overrides

__all__ = ["InstallationConfig", "load_config", "merge_overrides"]
