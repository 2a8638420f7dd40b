"""services/api/__init__.py"""
