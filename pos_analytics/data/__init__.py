"""
Demo Data Module
"""
from .generators import DemoDataGenerator, load_demo_data

__all__ = [
    "DemoDataGenerator",
    "load_demo_data",
]
