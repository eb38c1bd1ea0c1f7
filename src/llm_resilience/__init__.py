"""
LLM provider resilience layer.

Sits between application code and a remote LLM backend and guarantees that
every completion either succeeds with a value matching caller expectations or
fails with a classified, diagnosable ProviderError:
- Context window resolution per model
- Token budget validation before dispatch
- Remote failure classification into a closed error taxonomy
- Bounded exponential backoff retries
- Structured (JSON Schema constrained) completions

Architecture: httpx transport + pure classification/budget functions + async retry executor
"""

__version__ = "0.1.0"
