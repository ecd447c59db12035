"""Installer startup sequencer.

- Resolve the QML directory, settings.conf and the branding descriptor from
  prioritized candidate locations
- Bring up modules, the job queue and the window in a fixed order
- Refuse to start at all when a required resource is missing
"""

__version__ = "3.2.0"

__all__ = ["__version__"]
