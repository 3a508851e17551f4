"""
PhoneCam - phone as a webcam and screen question scanner.
"""
__version__ = "0.1.0"
