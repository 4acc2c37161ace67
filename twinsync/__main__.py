"""
Allows running TwinSync with ``python -m twinsync``.

Author: TwinSync Project
License: MIT
"""

from twinsync.cli import main

main(prog_name="twinsync")
