"""Bridge LFU alerting and authorization core."""
