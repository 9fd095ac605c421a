"""
Hi-Pot Test Log - API Routers
Version: 1.0.0
"""
