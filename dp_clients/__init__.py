"""HTTP API clients for dataset, dimension and content services."""

__version__ = "0.1.0"
