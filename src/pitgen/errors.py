class PitgenError(Exception):
    """Base error for dungeon generation exceptions."""


class ConfigurationError(PitgenError):
    """Raised when a pipeline or pass configuration is structurally invalid.

    Covers unknown pass types, a wrong number of base passes and malformed
    pipeline mappings. Always raised before the grid is touched.
    """
