"""MultiversX wallet actions for chat agents."""

__version__ = "0.1.0"
