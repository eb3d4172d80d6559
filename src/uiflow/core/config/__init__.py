from .main import ConfigLoadingError, UiFlowConfig

__all__ = ["ConfigLoadingError", "UiFlowConfig"]
