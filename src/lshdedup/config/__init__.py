from .config import Config, LSHConfig, MonitoringConfig

__all__ = ["Config", "LSHConfig", "MonitoringConfig"]
