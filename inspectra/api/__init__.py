"""HTTP API for inspectra."""
