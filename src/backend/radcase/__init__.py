"""
RadCase 病例复习后端
"""
__version__ = "0.1.0"
