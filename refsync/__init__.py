"""refsync — ref diffing and feedback actions for source migrations."""

__version__ = "0.1.0"
