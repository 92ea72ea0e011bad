"""
Property-based tests for the p-code stepper.

This package hosts Hypothesis strategies for random frames and the test
entrypoints for both the fast CI lane and the nightly fuzz job.
"""
