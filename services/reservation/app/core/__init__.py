"""Core configuration, persistence and error primitives."""
