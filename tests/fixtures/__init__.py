"""
Shared test fixtures for eventdbx_native.

- native: compiles the C stub of the native library
- fakes: pure-Python native library stand-ins
"""
