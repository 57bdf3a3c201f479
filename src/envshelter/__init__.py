"""envshelter: keep .env secrets out of plain sight while editing."""

__version__ = "0.1.0"
