"""HTTP API of the reservation service."""
