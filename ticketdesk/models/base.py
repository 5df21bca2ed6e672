"""Shared database handle for the models package."""
from .. import db

__all__ = ['db']
