"""BeamScan - Beam scanning and particle collection simulator."""

from beamscan.logging_config import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = ["__version__", "configure_logging", "get_logger"]
