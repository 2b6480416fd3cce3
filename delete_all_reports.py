#!/usr/bin/env python3
"""
CitizenWatch - Delete All Reports
Administrative purge of every report in the configured store.
Stored photos are not touched.
"""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

load_dotenv()

from citizenwatch.api.main import get_report_store

MATCH_ALL = ".*"


def main():
    store = get_report_store()
    try:
        deleted = store.delete_many(MATCH_ALL)
    except Exception as e:
        print(f"Error deleting reports: {e}")
        sys.exit(1)
    finally:
        store.close()
    print(f"Deleted {deleted} reports.")

if __name__ == "__main__":
    main()
