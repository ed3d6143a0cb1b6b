# -*- coding: utf-8 -*-
"""Utilities to compare and update PostgreSQL table constraints"""

__version__ = '0.1.0'
