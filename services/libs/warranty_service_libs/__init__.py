"""
Warranty Service Libraries Package.

Shared logging and error handling infrastructure for the warranty services.
"""
