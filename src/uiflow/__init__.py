"""uiflow: declarative UI-flow verification for rendered web applications."""

__version__ = "0.1.0"
