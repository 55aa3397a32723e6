from typing import Any, Dict, List, Tuple

DEFAULT_SENSITIVE_COMMANDS: Tuple[str, ...] = (":ban", ":kick", ":kill", ":unadmin", ":unmod", ":down", ":pban")
DEFAULT_MASS_ACTION_KEYWORDS: Tuple[str, ...] = ("all", "others", "random")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_str_list(value: Any, default: Tuple[str, ...]) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return list(default)


class _SettingsSection:
    """Base helper exposing `get` and `as_dict` over one YAML section."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data


class RaidDetectionSettings(_SettingsSection):
    """Typed accessors for the ``raid_detection`` section.

    Unset or malformed values fall back to the defaults the detector was
    tuned with: six sensitive commands inside five seconds.
    """

    @property
    def sensitive_commands(self) -> List[str]:
        return _as_str_list(self.data.get("sensitive_commands"), DEFAULT_SENSITIVE_COMMANDS)

    @property
    def mass_action_keywords(self) -> List[str]:
        return _as_str_list(self.data.get("mass_action_keywords"), DEFAULT_MASS_ACTION_KEYWORDS)

    @property
    def high_frequency_threshold(self) -> int:
        value = _as_int(_as_dict(self.data.get("high_frequency")).get("threshold"), 6)
        return value if value > 0 else 6

    @property
    def high_frequency_window_seconds(self) -> int:
        value = _as_int(_as_dict(self.data.get("high_frequency")).get("window_seconds"), 5)
        return value if value >= 0 else 5


class RollbackSettings(_SettingsSection):
    """Typed accessors for the ``rollback`` section."""

    @property
    def default_lookback_hours(self) -> float:
        return _as_float(self.data.get("default_lookback_hours"), 24.0)

    @property
    def default_log_limit(self) -> int:
        return _as_int(self.data.get("default_log_limit"), 100)

    @property
    def explicit_log_limit(self) -> int:
        return _as_int(self.data.get("explicit_log_limit"), 1000)

    @property
    def command_priority(self) -> int:
        return _as_int(self.data.get("command_priority"), 10)


class RaidMonitorSettings(_SettingsSection):
    """Typed accessors for the ``raid_monitor`` section."""

    @property
    def interval_seconds(self) -> float:
        return _as_float(self.data.get("interval_seconds"), 10.0)

    @property
    def scan_lookback_seconds(self) -> float:
        return _as_float(self.data.get("scan_lookback_seconds"), 60.0)

    @property
    def alert_cooldown_seconds(self) -> float:
        return _as_float(self.data.get("alert_cooldown_seconds"), 300.0)

    @property
    def alert_channels(self) -> Dict[str, int]:
        """Map of server ID to the Discord channel ID receiving raid alerts."""
        channels: Dict[str, int] = {}
        for server_id, channel_id in _as_dict(self.data.get("alert_channels")).items():
            try:
                channels[str(server_id)] = int(channel_id)
            except (TypeError, ValueError):
                continue
        return channels
