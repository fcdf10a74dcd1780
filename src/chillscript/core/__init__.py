"""Errors and settings shared by the chill-script parser, runtime and CLI."""
