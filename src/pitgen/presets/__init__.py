"""Packaged pipeline presets (YAML), loaded with ``pitgen.config.load_preset``."""
