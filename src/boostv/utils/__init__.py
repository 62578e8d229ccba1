"""Utility functions and tools used across the boostv package.

- `config`: configuration file parsing
- `errors`: per-event skip conditions and warnings
- `factory`: instantiate readers/writers from configuration blocks
- `globals`: constants shared across modules
- `logger`: logging configuration
- `stopwatch`: performance timing utilities
"""
