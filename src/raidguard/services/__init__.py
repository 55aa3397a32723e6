"""
Async services built around the detection and rollback cores.

- **collaborators.py**: Protocols for the log store, command queue, audit log
  and alert notifier.
- **memory_backends.py**: In-memory implementations of those protocols.
- **raid_monitor.py**: Background task scanning each server on an interval
  and alerting once per finding per cooldown.
- **discord_alert_notifier.py**: Posts raid alert embeds to per-server
  Discord channels.
"""
