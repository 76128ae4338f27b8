"""Unit tests for earscope_installer."""
