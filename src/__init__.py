# src/__init__.py
