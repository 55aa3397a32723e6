from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from raidguard.configuration.raid_settings import RaidDetectionSettings, RaidMonitorSettings, RollbackSettings
from raidguard.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    Caches the contents of ``./config/app_config.yml``, exposes dictionary-like
    access helpers and wraps each feature section in a typed settings helper.
    Reads take an fcntl shared lock so a concurrent writer never hands us a
    half-written file.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.warning("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, key: str) -> Dict[str, Any]:
        section = self._data.get(key, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns an empty dict when the file is missing or unreadable.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def raid_detection(self) -> RaidDetectionSettings:
        """Thresholds and verb sets used by the raid detector."""
        return RaidDetectionSettings(self._section("raid_detection"))

    @property
    def rollback(self) -> RollbackSettings:
        """Lookback, fetch limits and queue priority for rollbacks."""
        return RollbackSettings(self._section("rollback"))

    @property
    def raid_monitor(self) -> RaidMonitorSettings:
        """Polling interval, alert cooldown and alert channels of the monitor."""
        return RaidMonitorSettings(self._section("raid_monitor"))


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
