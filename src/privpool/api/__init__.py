"""HTTP surface of the privacy pool."""
