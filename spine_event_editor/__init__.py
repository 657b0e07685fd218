"""Frame event editor for PySpine skeletal animations."""

__version__ = "0.1.0"
