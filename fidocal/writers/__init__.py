"""Export writers for the protein-level results."""
from .txt import to_txt
