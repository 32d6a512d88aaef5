"""llmsfull - single-file LLM corpus export for documentation sites."""

__version__ = "0.1.0"
