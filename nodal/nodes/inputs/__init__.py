"""Source nodes: hand-entered numbers and uploaded data."""
