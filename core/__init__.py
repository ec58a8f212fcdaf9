"""
Core Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models
"""

from . import models
from . import logic
