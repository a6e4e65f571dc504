"""Budget Manager - personal budget tracking on Reflex"""

__version__ = "0.1.0"
