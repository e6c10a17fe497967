"""deploy-local: deploy packaged releases to the local machine."""

__version__ = "0.1.0"
