"""Temple Hub: program follow-up lists, outreach calls and derived sessions."""

__version__ = "0.1.0"
