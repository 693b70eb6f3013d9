"""
Autotrade App - Automatic Consensus Trading Engine

A retail trading assistant that scores technical indicators across two
timeframes into a consensus signal, opens bracket orders behind risk gates,
tracks them to exit, and prices options with Black-Scholes.
"""

__version__ = "0.1.0"
__author__ = "Autotrade Team"
