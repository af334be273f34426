"""
Core module - Entities and ports shared by the health package and adapters.
"""
