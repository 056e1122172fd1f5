"""unitwire — conditional component activation with layered property binding."""

__version__ = "0.1.0"
