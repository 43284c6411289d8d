"""wavejoin: join multi-wave longitudinal survey files and explore the result."""

__version__ = "0.1.0"
