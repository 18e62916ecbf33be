"""subintake - Subcontractor document intake.

Extracts contact records (company, person, email, phone, trade) from
proposal documents, with per-field confidence and optional model
augmentation, and groups them by subcontractor.
"""

__version__ = "0.1.0"
