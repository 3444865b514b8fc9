"""
QR Order - restaurant order taking service
"""
__version__ = "1.0.0"
