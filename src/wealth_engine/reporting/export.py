"""
Report Export
=============
Write a PortfolioReport to disk: the whole report as JSON, the tabular
parts (holdings, allocations, drift, risks, trades) as CSV, optionally
bundled into a ZIP archive.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional
import json
import zipfile

import pandas as pd

from wealth_engine.analytics.allocation import allocation_frame, drift_frame
from wealth_engine.analytics.valuation import valuation_frame
from wealth_engine.models.portfolio import PortfolioReport
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


# ================================================================================
# UTILITY FUNCTIONS
# ================================================================================

def create_output_dir(output_dir: str = "./output") -> Path:
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


# ================================================================================
# JSON EXPORT
# ================================================================================

def report_payload(report: PortfolioReport) -> dict:
    return {
        "metadata": {
            "generated_at": datetime.now().isoformat(),
            "reporting_currency": report.reporting_currency,
        },
        "report": report.to_dict(),
    }


def export_to_json(output_dir: Path, report: PortfolioReport, timestamp: Optional[str] = None) -> Path:
    timestamp = timestamp or get_timestamp()
    json_file = output_dir / f"portfolio_report_{timestamp}.json"
    with open(json_file, 'w', encoding='utf-8') as f:
        json.dump(report_payload(report), f, indent=2)
    return json_file


# ================================================================================
# CSV EXPORT
# ================================================================================

def export_to_csv(output_dir: Path, report: PortfolioReport, timestamp: Optional[str] = None) -> List[Path]:
    """One CSV per table; empty tables are still written (header only)."""
    timestamp = timestamp or get_timestamp()
    exported: List[Path] = []

    def _write(frame: pd.DataFrame, name: str, index: bool) -> None:
        path = output_dir / f"{name}_{timestamp}.csv"
        frame.to_csv(path, index=index)
        exported.append(path)

    # 1. Holdings
    _write(valuation_frame(report.valuations), "holdings", index=False)

    # 2. Allocation tables
    for dimension, slices in report.allocations.items():
        _write(allocation_frame(slices), f"allocation_{dimension}", index=True)

    # 3. Drift
    _write(drift_frame(report.drift), "drift", index=True)

    # 4. Concentration risks
    risks = pd.DataFrame([r.to_dict() for r in report.concentration.risks],
                         columns=['type', 'name', 'percentage', 'threshold', 'severity'])
    _write(risks, "concentration_risks", index=False)

    # 5. Rebalancing trades
    trades = pd.DataFrame([a.to_dict() for a in report.rebalancing.actions],
                          columns=['asset_class', 'direction', 'amount', 'urgency', 'drift',
                                   'asset_id', 'asset_name', 'estimated_cgt', 'realized_gain'])
    _write(trades, "rebalancing", index=False)

    return exported


def create_zip_archive(output_dir: Path, files: List[Path], timestamp: str) -> Path:
    zip_path = output_dir / f"portfolio_report_{timestamp}.zip"
    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for file_path in files:
            zf.write(file_path, arcname=file_path.name)
    return zip_path


# ================================================================================
# MASTER EXPORT FUNCTION
# ================================================================================

def export_report(report: PortfolioReport, output_dir: str = "./output",
                  formats=("json", "csv"), create_zip: bool = False) -> List[Path]:
    """
    Export the report in the requested formats.

    Returns:
        Paths written (the archive only, when create_zip removes the parts)
    """
    out = create_output_dir(output_dir)
    timestamp = get_timestamp()
    exported: List[Path] = []

    if "json" in formats:
        exported.append(export_to_json(out, report, timestamp))
    if "csv" in formats:
        exported.extend(export_to_csv(out, report, timestamp))

    if create_zip and exported:
        archive = create_zip_archive(out, exported, timestamp)
        for path in exported:
            path.unlink()
        exported = [archive]

    logger.info(f"Exported {len(exported)} file(s) to {out.absolute()}")
    return exported
