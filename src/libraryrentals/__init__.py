"""Library lending workflow: books, customers and rentals."""

__version__ = "0.1.0"
