"""
Root pytest configuration.

Enables faulthandler for the whole run: tests that wrap raw addresses
(``wrap_address``) would otherwise die silently on a bad pointer.
"""

import faulthandler

faulthandler.enable()
