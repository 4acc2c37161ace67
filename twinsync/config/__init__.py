"""
TwinSync Configuration Module

Loads configuration from an optional YAML file with environment variable
and command-line overrides, validated by Pydantic models.

Author: TwinSync Project
License: MIT
"""
