"""
Safety Forms Platform
Blueprint registry.
"""
