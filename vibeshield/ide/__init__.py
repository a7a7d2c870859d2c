"""
Vibe Shield IDE Integrations
Rule files that tell AI coding agents to run the scanner
"""

from vibeshield.ide.cursor import InitResult, init_cursor_rules

__all__ = ['InitResult', 'init_cursor_rules']
