"""BMP280 sensor support: definitions, compensation formulas, a callback driven device class and a polling monitor."""

__version__ = "0.1.0"
__all__ = ["compensation", "defs", "device", "monitor"]