"""Time series model, extraction and multi-host aggregation."""
