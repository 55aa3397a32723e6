"""
Raid detection.

- **detection_rules.py**: Sensitive-command classifier and one class per
  heuristic (high frequency, mass action, unauthorized).
- **raid_detector.py**: ``RaidDetector.scan`` runs the configured rules over a
  batch of command logs.
"""
