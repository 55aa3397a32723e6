"""
Rollback of moderation commands.

- **rollback_planner.py**: Pure mapping of log entries to counter-commands
  through a verb inversion table.
- **rollback_service.py**: Async workflow that fetches an actor's logs,
  queues the planned reversals and writes a security event.
"""
