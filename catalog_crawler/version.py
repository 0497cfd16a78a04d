"""Central versioning and schema constants for the catalog crawler."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION"]

#: Semantic version of this codebase (bump using SemVer).
__version__ = "0.2.0"

#: Configuration schema version (increment if breaking changes to config format).
#: 2: single start_url, page budget and selector timeout replace depth control.
CONFIG_SCHEMA_VERSION = 2
