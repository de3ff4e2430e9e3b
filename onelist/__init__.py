"""OneList governance engine: posture scoring, MLG diagnostic, gap pipeline."""

__version__ = "0.4.0"
