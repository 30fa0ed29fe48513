"""Container image vulnerability scan resources, event filters, indexes and apply builders."""

__version__ = "0.1.0"