"""HTTP surface of the space compliance engine."""
