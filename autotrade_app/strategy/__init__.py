"""
Consensus strategy and risk management.
"""
