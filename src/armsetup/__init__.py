"""Host bootstrap and launch-script generator for the Automatic Ripping Machine container."""

__version__ = "0.1.0"
