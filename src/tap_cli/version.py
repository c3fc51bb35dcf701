"""Single source of the tap-cli version string."""

__version__: str = "0.8.0"
