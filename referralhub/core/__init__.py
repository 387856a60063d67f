"""Core configuration, errors and request plumbing"""
