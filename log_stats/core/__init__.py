# -*- coding: utf-8 -*-
"""Core module public API exports"""

# Terminal color configuration (see config.py)
from .config import Colors

# Data model and errors (see models.py, errors.py)
from .models import LogFormat, LogStats, RequestRecord
from .errors import FileError, FileOpenError, FileProcessingError, LineParseError, LogStatsError

# Detection, parsing and aggregation pipeline
from .detection import detect_format
from .parsers import parse_line, parse_apache_line, parse_simple_line, strip_query
from .aggregation import aggregate_file, aggregate_lines, fold_record
from .merge import StatsMerger, merge_stats
from .coordinator import AnalysisResult, analyze_files, iter_file_results

# Explicit exports control
__all__ = [
    'Colors',
    'LogFormat', 'LogStats', 'RequestRecord',
    'FileError', 'FileOpenError', 'FileProcessingError', 'LineParseError', 'LogStatsError',
    'detect_format',
    'parse_line', 'parse_apache_line', 'parse_simple_line', 'strip_query',
    'aggregate_file', 'aggregate_lines', 'fold_record',
    'StatsMerger', 'merge_stats',
    'AnalysisResult', 'analyze_files', 'iter_file_results',
]
