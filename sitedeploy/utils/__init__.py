"""
Shared utilities: settings, logging and input validation
"""
