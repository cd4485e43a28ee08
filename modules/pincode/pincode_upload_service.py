import os

import pandas as pd

from logger import logger

from models import Pincode_Mapping
from modules.pincode.pincode_schema import PincodeUploadSummaryModel


REQUIRED_COLUMNS = ["Pincode", "State", "City"]
OPTIONAL_COLUMNS = ["District"]
BATCH_SIZE = 1000
MAX_TEXT_LENGTH = 50


def read_pincode_master(file_path: str) -> pd.DataFrame:
    """
    Read and clean a pincode master file (.csv, .xls or .xlsx).

    Headers are matched case-insensitively. City, state and district are
    trimmed, lowercased and cut to the column width. Later duplicates of a
    pincode win.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Pincode master file not found: {file_path}")

    try:
        if file_path.lower().endswith(".csv"):
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(file_path, dtype=str, keep_default_na=False)
    except Exception as e:
        raise ValueError(f"Error reading pincode master file: {str(e)}")

    df.columns = df.columns.str.strip()
    column_mapping = {}
    for col in df.columns:
        for expected in REQUIRED_COLUMNS + OPTIONAL_COLUMNS:
            if col.lower() == expected.lower():
                column_mapping[col] = expected
    df = df.rename(columns=column_mapping)

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValueError(
            f"Missing required columns: {missing_columns}. "
            f"Found columns: {list(df.columns)}"
        )

    if "District" not in df.columns:
        df["District"] = ""

    df = df[REQUIRED_COLUMNS + OPTIONAL_COLUMNS].copy()

    df["Pincode"] = df["Pincode"].astype(str).str.strip()
    df = df[df["Pincode"] != ""]
    if not df["Pincode"].str.fullmatch(r"[0-9]+").all():
        raise ValueError("Invalid pincode values found. All pincodes must be numeric")
    df["Pincode"] = df["Pincode"].astype(int)

    for col in ["State", "City", "District"]:
        df[col] = df[col].astype(str).str.strip().str.lower().str[:MAX_TEXT_LENGTH]

    df = df[(df["State"] != "") & (df["City"] != "")]
    df = df.drop_duplicates(subset="Pincode", keep="last")

    return df.sort_values(by="Pincode", ascending=True).reset_index(drop=True)


def upload_pincode_master(
    file_path: str, session_factory, update_existing: bool = True
) -> PincodeUploadSummaryModel:
    """
    Load a pincode master file into the pincode_mapping table.

    Args:
        file_path: CSV or Excel file with Pincode, State, City and optional District
        session_factory: callable returning a SQLAlchemy session
        update_existing: update known pincodes when True, skip them when False
    """
    df = read_pincode_master(file_path)

    db = session_factory()

    try:
        summary = PincodeUploadSummaryModel(total_rows_in_file=len(df))
        errors = []
        total_rows = len(df)

        logger.info(f"Starting pincode master upload. Total rows to process: {total_rows}")

        for i in range(0, total_rows, BATCH_SIZE):
            batch_df = df.iloc[i : i + BATCH_SIZE]

            existing = {
                record.pincode: record
                for record in db.query(Pincode_Mapping)
                .filter(Pincode_Mapping.pincode.in_(batch_df["Pincode"].tolist()))
                .all()
            }

            new_records = []
            for row in batch_df.itertuples(index=False):
                try:
                    pincode = int(row.Pincode)
                    district = row.District or None
                    record = existing.get(pincode)

                    if record is None:
                        new_records.append(
                            Pincode_Mapping(
                                pincode=pincode,
                                state=row.State,
                                city=row.City,
                                district=district,
                            )
                        )
                    elif update_existing:
                        record.state = row.State
                        record.city = row.City
                        record.district = district
                        summary.updated += 1
                    else:
                        summary.skipped += 1

                except Exception as e:
                    summary.errors += 1
                    errors.append({"pincode": row.Pincode, "error": str(e)})
                    logger.error(f"Error processing row with pincode {row.Pincode}: {str(e)}")

            db.add_all(new_records)
            db.commit()
            summary.inserted += len(new_records)

            logger.info(
                f"Processed batch {i // BATCH_SIZE + 1}/{(total_rows - 1) // BATCH_SIZE + 1}"
            )

        summary.error_details = errors[:10]

        logger.info(f"Pincode master upload completed. Summary: {summary.model_dump()}")

        return summary

    except Exception as e:
        db.rollback()
        logger.error(f"Error during pincode master upload: {str(e)}")
        raise
    finally:
        db.close()
