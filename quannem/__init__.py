"""
                Quán Nem Local Data API

Reservation and review storage for the Quán Nem restaurant website:
static baseline data merged with a local overlay, with every new
record announced on Discord.

Author: Your Name
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
