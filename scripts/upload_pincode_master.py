"""
Script to upload a pincode master file (CSV or Excel) to the pincode_mapping table.

Usage:
    python scripts/upload_pincode_master.py <path_to_file> [false]

Passing "false" skips pincodes that already exist instead of updating them.

Example:
    python scripts/upload_pincode_master.py pincode_master.xlsx
"""

import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.db import SessionLocal, init_models
from modules.pincode.pincode_upload_service import upload_pincode_master


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/upload_pincode_master.py <path_to_file> [false]")
        print("\nExample:")
        print("    python scripts/upload_pincode_master.py pincode_master.xlsx")
        sys.exit(1)

    file_path = sys.argv[1]

    update_existing = True
    if len(sys.argv) > 2 and sys.argv[2].lower() == "false":
        update_existing = False

    try:
        print(f"Reading file: {file_path}")
        print(f"Update existing records: {update_existing}")
        print("-" * 50)

        init_models()
        summary = upload_pincode_master(
            file_path, SessionLocal, update_existing=update_existing
        )

        print("\n" + "=" * 50)
        print("UPLOAD SUMMARY")
        print("=" * 50)
        print(f"Total rows in file: {summary.total_rows_in_file}")
        print(f"Inserted: {summary.inserted}")
        print(f"Updated: {summary.updated}")
        print(f"Skipped: {summary.skipped}")
        print(f"Errors: {summary.errors}")

        if summary.error_details:
            print("\nFirst few errors:")
            for error in summary.error_details:
                print(f"  Pincode {error['pincode']}: {error['error']}")

        print("\n" + "=" * 50)
        print("Upload completed successfully!")

    except Exception as e:
        print(f"\nERROR: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
