"""Test suite for the T2DPharmSim library.

The structure of this test package mirrors the structure of the main
`T2DPharmSim` library: tests are organized into submodules corresponding
to the modules in the package (e.g., `tests.core` for `T2DPharmSim.core`).

The `pytest` framework is used for test discovery and execution.
"""
