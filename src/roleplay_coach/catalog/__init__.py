from .loader import ScenarioCatalog

__all__ = ["ScenarioCatalog"]
