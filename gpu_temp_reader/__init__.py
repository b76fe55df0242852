"""
GPU Temp Reader - Core Package
Terminal GPU temperature and load monitor backed by nvidia-smi
"""

__version__ = '1.0.0'

from . import config

__all__ = ['config']
