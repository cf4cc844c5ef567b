"""Framework-independent request handlers and in-memory services for a warehouse and logistics API."""

__version__ = "0.1.0"