"""
Core models, column table and type coercion.
"""
