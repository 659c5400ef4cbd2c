"""Frame Manager: admin UI and backing service for frame image assets"""

__version__ = "1.0.0"
