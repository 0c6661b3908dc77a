"""
Emberline - API Module
"""
