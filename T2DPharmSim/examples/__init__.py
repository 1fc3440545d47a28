"""Runnable examples for T2DPharmSim."""
