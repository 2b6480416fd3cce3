"""
CitizenWatch - Vercel Serverless Entry Point
Serves the reporting API (submission, listing, heat map, stats, map)
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from citizenwatch.api.main import app

# Vercel serverless handler
handler = app
