"""Utils module exports"""
from modai.utils.event_log import EventLog
from modai.utils.formatting import truncate_text, to_json, format_block

__all__ = ["EventLog", "truncate_text", "to_json", "format_block"]
