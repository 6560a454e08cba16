"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (install URL base, defaults)
- exceptions: Custom exception hierarchy
- session: Authenticated hub session resolution
"""
