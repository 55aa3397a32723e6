"""
Utility helpers shared across raidguard.

- **logger.py**: Centralized logging configuration with coloured console
  output through prompt_toolkit and a rotating per-session log file. Silences
  Discord and networking internals.

- **command_parsing.py**: Parsing of raw in-game command strings
  (``:verb target ...``) into a normalized form used by both the raid
  detector and the rollback planner.

- **ttl_cache.py**: Small key -> (value, expiry) cache used to suppress
  repeated raid alerts. Instances are injected, never module globals.

- **errors.py**: Exception hierarchy for the service layer.
"""
