"""services/api/routers/__init__.py"""
