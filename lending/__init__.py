"""
Núcleo de empréstimos de biblioteca.
"""

__version__ = "0.1.0"
