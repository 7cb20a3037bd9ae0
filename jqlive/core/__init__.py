"""Core services shared across jqlive."""
