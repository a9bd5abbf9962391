# Shared declarative Base from db.py so every pathway table lives on one metadata
from db import Base

__all__ = ["Base"]
