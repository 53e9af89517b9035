"""Content workflow management API for creators and freelancers."""

__version__ = "1.0.0"
