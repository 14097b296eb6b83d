from .loader import ConfigError, ConvertConfig, CsvOptions, default_config, load_config

__all__ = ["ConfigError", "ConvertConfig", "CsvOptions", "default_config", "load_config"]
