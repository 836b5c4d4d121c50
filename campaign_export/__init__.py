"""Location campaign export engine.

Expands selected locations x ad variants into ad-platform bulk-import rows
and serializes them into the fixed-schema CSV the campaign importer expects.
"""

__version__ = "1.0.0"
