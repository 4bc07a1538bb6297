"""Resume optimizer wizard: task orchestration for step-by-step resume tailoring."""

__version__ = "1.0.0"
