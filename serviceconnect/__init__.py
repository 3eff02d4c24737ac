"""
ServiceConnect - technician availability and booking toolkit.
"""

__version__ = "0.1.0"
