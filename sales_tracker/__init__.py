"""
Sales Tracker - Source Package

Income and expense tracking with range analytics and CSV exports.

DESIGN PRINCIPLES:
1. Sign is derived from the entry type, never stored
2. Fail early, fail visibly: invalid sort keys and ranges are rejected
3. No silent corrections
4. The analytics engine is pure; the service layer audits
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Sales Tracker Team"
