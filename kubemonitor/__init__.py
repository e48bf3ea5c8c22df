"""kubemonitor - read-only Kubernetes monitoring console core."""

__version__ = "0.1.0"
