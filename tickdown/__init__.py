"""TickDown: many independent countdown timers with alarms."""

__version__ = "1.0.0"
