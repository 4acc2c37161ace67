"""
TwinSync Utilities

Logging setup and file operations.

Author: TwinSync Project
License: MIT
"""
