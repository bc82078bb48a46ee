"""
Test suites package.

Kept importable so the unit suite can share its fakes (`testsuites.unit.fakes`)
and so IDEs and `run_tests.py` resolve test modules by package path.
"""
