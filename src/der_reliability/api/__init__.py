"""HTTP API over the reliability engines."""
