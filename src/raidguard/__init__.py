"""
raidguard - raid detection and rollback for ERLC moderation

Core Components:

- **Raid Detection**: Scans batches of in-game command logs for coordinated
  abuse: bursts of sensitive commands from one player, mass-target commands
  such as ``:ban all``, and sensitive commands from players outside the
  server's allow-list.
- **Rollback Planning**: Maps previously executed commands to the
  counter-commands that undo them (``:ban x`` -> ``:unban x``).
- **Services**: Async rollback workflow and a periodic raid monitor that
  alert through Discord, wired to pluggable log store, command queue and
  audit log implementations.

Usage:
    from raidguard.detection.raid_detector import RaidDetector
    from raidguard.rollback.rollback_planner import RollbackPlanner

    detections = RaidDetector().scan(logs, authorized_user_ids)
    reversals = RollbackPlanner().calculate_reversals(logs)
"""

__version__ = "0.1.0"
