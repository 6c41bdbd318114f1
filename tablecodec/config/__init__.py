from .loader import AppConfig, ConfigError, JobConfig, LineLayout, load_config, resolve_config_path

__all__ = ["AppConfig", "ConfigError", "JobConfig", "LineLayout", "load_config", "resolve_config_path"]
