"""tap-cli: command-line client for the TAP platform management API.

Declarative command descriptors compiled into an argparse tree, plus a
name-to-ID resolution layer in front of the platform's REST API.
"""

from tap_cli.version import __version__

__all__: list[str] = ["__version__"]
