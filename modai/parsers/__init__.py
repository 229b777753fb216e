"""Parser module exports"""
from .directive_parser import DirectiveParser, extract_all, strip_all, find_balanced_object

__all__ = ['DirectiveParser', 'extract_all', 'strip_all', 'find_balanced_object']
