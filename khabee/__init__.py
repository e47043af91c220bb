"""
                        Khabee

Cloud-kitchen food ordering backend: kitchens and menus, client-side
cart checkout, transactional order placement and live order tracking.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
