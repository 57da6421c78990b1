"""Census Provider - declarative Census sync management.

Sync blueprints (YAML) are validated into typed models, translated into the
Census Management API wire shape, and read back without spurious drift.
"""

__version__ = "0.1.0"
