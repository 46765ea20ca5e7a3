"""Publish a place to Roblox Open Cloud, run a Luau script against it, and print its logs."""

__version__ = "0.1.0"
