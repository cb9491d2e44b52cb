"""Database access layer (DAL) for the truth-or-dare bot.

This sub-package encapsulates low-level DB interactions so that the rest of
business-logic remains storage-agnostic.
"""
