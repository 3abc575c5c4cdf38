"""Test suite for the GCC RTTI informer.

Test Structure:
- domain/: Models, class registry and the recovery services
- application/: End-to-end recovery over in-memory programs
- infrastructure/: ELF loading, platform detection, demangling, logging
- config/: Tests for configuration management
- utils/: Tests for utility functions

Run tests with pytest:
    pytest                    # Run all tests
    pytest -m unit            # Run unit tests only
    pytest -m integration     # Run end-to-end recovery tests only
"""

__version__ = "0.1.0"
