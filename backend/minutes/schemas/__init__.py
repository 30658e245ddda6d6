# minutes/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .analysis import *
from .meeting import *
from .organization import *
from .settings import *
