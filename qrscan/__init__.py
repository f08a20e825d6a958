"""Scan a QR code in the terminal using the system camera or a given image."""

__version__ = '0.1.9'
