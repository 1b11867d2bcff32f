"""Herald: publish build lifecycle state to GitHub commit statuses."""

from __future__ import annotations

__version__ = "0.1.0"
