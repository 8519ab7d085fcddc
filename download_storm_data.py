"""
Download the NOAA storm database used by the harm analysis.

The file is kept bz2-compressed: pandas reads it directly, and the
uncompressed CSV is over half a gigabyte. Saved to the raw layer
(data/01_raw/), where the Kedro catalog expects it.
"""

from pathlib import Path

import pandas as pd
import requests

URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
RAW_DATA_DIR = Path("data/01_raw")
TARGET_FILE = RAW_DATA_DIR / "repdata_StormData.csv.bz2"


def download_storm_data(force: bool = False) -> str:
    """
    Download the storm database unless it is already on disk.

    Args:
        force: Download again even if the file exists

    Returns:
        str: Path to the compressed CSV file
    """
    RAW_DATA_DIR.mkdir(parents=True, exist_ok=True)

    if TARGET_FILE.exists() and not force:
        print(f"Already exists, skipping: {TARGET_FILE}")
        return str(TARGET_FILE)

    print("Downloading NOAA storm database...")
    print(f"Source: {URL}")
    print(f"Target: {TARGET_FILE}")

    partial_file = TARGET_FILE.with_suffix(".part")
    response = requests.get(URL, stream=True, timeout=60)
    response.raise_for_status()

    with open(partial_file, "wb") as f:
        for chunk in response.iter_content(chunk_size=8192):
            f.write(chunk)

    # Only a complete download takes the final name
    partial_file.replace(TARGET_FILE)

    print(f"Downloaded {TARGET_FILE.stat().st_size / 1024 / 1024:.1f} MB")
    return str(TARGET_FILE)


def explore_data(file_path: str) -> None:
    """
    Print the columns the harm analysis uses and their raw code sets.

    Args:
        file_path: Path to the compressed CSV file
    """
    print("\n" + "=" * 60)
    print("NOAA STORM DATABASE - DATA EXPLORATION")
    print("=" * 60)

    df = pd.read_csv(
        file_path,
        usecols=["EVTYPE", "FATALITIES", "INJURIES", "PROPDMG",
                 "PROPDMGEXP", "CROPDMG", "CROPDMGEXP"],
        dtype={"PROPDMGEXP": str, "CROPDMGEXP": str},
    )

    print(f"\nRow count: {len(df):,}")
    print(f"Distinct EVTYPE labels: {df['EVTYPE'].nunique():,}")

    for col in ["PROPDMGEXP", "CROPDMGEXP"]:
        print(f"\n{col} CODES")
        print(df[col].fillna("").value_counts().sort_index().to_string())


if __name__ == "__main__":
    csv_file = download_storm_data()
    explore_data(csv_file)
