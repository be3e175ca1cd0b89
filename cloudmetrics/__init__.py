"""cloudmetrics — tenant-scoped credential and exporter API over Hasura."""

__version__ = "0.1.0"
