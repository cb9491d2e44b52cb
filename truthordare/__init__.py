"""Truth-or-dare question bot: data access layer and question workflows."""

__version__ = "0.1.0"
