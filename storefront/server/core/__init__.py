"""
Server core: settings and API constants.
"""
