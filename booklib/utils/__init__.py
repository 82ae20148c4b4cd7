"""
Utilities Package

Helper functions used across the application:
- logging.py: Root logger configuration (text or JSON output)
"""
