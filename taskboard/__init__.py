"""taskboard - a TASKS.md task board with worker automation."""

__version__ = "0.1.0"
