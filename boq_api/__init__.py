"""BOQ API: server-side relay between the procurement frontend and the AI service."""

__version__ = "1.0.0"
