"""HTTP API for the dashboard."""
