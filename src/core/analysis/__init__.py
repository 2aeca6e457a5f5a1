#!/usr/bin/env python3
"""
Coverage analysis: aggregation, entity extraction, orchestration and reports.
"""

from .entities import EntityExtractor
from .reports import ReportService
from .topic_analysis import TopicAnalysisService

__all__ = ['EntityExtractor', 'ReportService', 'TopicAnalysisService']
