"""Edit SSH client configs that span a main file and its Include files."""

__version__ = "0.3.0"
