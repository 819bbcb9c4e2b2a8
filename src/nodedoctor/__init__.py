"""node-doctor: Inventory and health assessment for Node.js version managers."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
