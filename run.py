#!/usr/bin/env python3
"""Convenience runner for the fleet trajectory command line.

Usage:
    python run.py optimize trip.json --report trip.xlsx
"""
from fleet_trajectory.main import main

if __name__ == "__main__":
    raise SystemExit(main())
