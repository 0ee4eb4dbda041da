"""hearth: household behavioral anomaly detection over hourly sensor activity."""

__version__ = "0.1.0"
