# Utility modules for the lot ledger
from .sanitizer import sanitize_text, sanitize_identifier
