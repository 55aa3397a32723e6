"""
Discord presentation helpers.

- **raid_alert_embed.py**: Builds the raid alert embed listing detections.
"""
