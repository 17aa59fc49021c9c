"""accesskeys - lifecycle of project-scoped SSH and cloud credentials."""

__version__ = "1.0.0"
