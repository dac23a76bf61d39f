"""
Form submission export service.
"""
