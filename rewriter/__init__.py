"""Profile-driven rewriting of transcriptions through local or hosted LLMs."""

__version__ = "1.0.0"
