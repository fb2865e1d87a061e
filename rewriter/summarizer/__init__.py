"""Dispatching of profile prompts to LLM backends."""
