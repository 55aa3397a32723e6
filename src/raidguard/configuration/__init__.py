"""
Application configuration.

- **app_configuration.py**: ``AppConfig`` loads ``config/app_config.yml`` with
  PyYAML under an fcntl shared lock and exposes typed settings sections. A
  shared ``app_config`` instance is created at import time.

- **raid_settings.py**: Typed wrappers for the ``raid_detection``,
  ``rollback`` and ``raid_monitor`` sections, falling back to tuned defaults
  when values are missing or malformed.
"""
