"""repcycle: workout logging with plan and cycle progression."""

__version__ = "0.1.0"
