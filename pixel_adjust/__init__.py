# Non-destructive RGBA adjustment pipeline
__version__ = "0.1.0"
