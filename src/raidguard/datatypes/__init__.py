"""
Value objects shared by the detection and rollback components.

- **command_datatypes.py**: CommandLogEntry, RollbackLogEntry and ParsedCommand.
- **detection_datatypes.py**: Detection and the built-in DetectionType tags.
- **rollback_datatypes.py**: ReversalAction plus the queue, audit and result
  types used by the rollback workflow.
"""
