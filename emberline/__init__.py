"""
Emberline - Wildfire Emergency Analysis
Fire risk scoring, spread prediction, resource allocation, biodiversity
risk and tactical planning for responder organizations.
"""

__version__ = "0.1.0"
