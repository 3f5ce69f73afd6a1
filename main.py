# main.py
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Any, List

from extract.data_extract import extract_pdf_to_pages, merge_pages
from extract.unified_lines import group_rows, rows_to_lines
from layout.classes import ExtractionSettings
from reconcile import DualStrategyExtractor
from utils import nuke_dir
from validator import print_validation

USAGE = "usage: python main.py [--settings settings.json] report.pdf [report2.pdf ...]"


def load_settings(path: str | None) -> ExtractionSettings:
    if not path:
        return ExtractionSettings()
    with open(path, "r", encoding="utf-8") as f:
        return ExtractionSettings.from_mapping(json.load(f))


def process_pdf(
    pdf_path: str,
    extractor: DualStrategyExtractor,
    save_artifacts: bool = True,
) -> Dict[str, Any]:
    """Single-PDF pipeline: decode -> both strategies -> pick one -> (optional) save debug + JSON."""
    pages = extract_pdf_to_pages(pdf_path, workers=extractor.geometric.settings.page_workers)
    outcome = extractor.extract(pages)
    diag = outcome.diagnostics
    print(f"🏦 Template: {diag.get('template')} ({diag.get('method')}) - {pdf_path}")
    print(f"🧮 Selected {outcome.selected_strategy} strategy, {outcome.confidence} confidence {outcome.scores}")

    if save_artifacts:
        audit_dir = Path("results_audit")
        audit_dir.mkdir(parents=True, exist_ok=True)
        stem = Path(pdf_path).stem
        # 1) plain text dump of grouped rows
        rows = group_rows(merge_pages(pages), extractor.geometric.settings.row_tolerance)
        with open(audit_dir / (stem + "_rows.txt"), "w", encoding="utf-8") as f:
            for ln in rows_to_lines(rows):
                f.write(ln + "\n")
        # 2) both strategies plus diagnostics
        with open(audit_dir / (stem + "_outcome.json"), "w", encoding="utf-8") as f:
            json.dump(outcome.to_dict(), f, ensure_ascii=False, indent=2)

    print_validation(outcome.selected_result, label=Path(pdf_path).name)
    return outcome.selected_result.to_dict()


def main(argv: List[str] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = list(sys.argv[1:] if argv is None else argv)
    settings_path = None
    if "--settings" in args:
        i = args.index("--settings")
        if i + 1 >= len(args):
            print(USAGE)
            return 2
        settings_path = args[i + 1]
        del args[i:i + 2]
    if not args:
        print(USAGE)
        return 2

    try:
        settings = load_settings(settings_path)
    except ValueError as e:
        print(f"❌ Invalid settings {settings_path}: {e}")
        return 2
    extractor = DualStrategyExtractor(settings)
    bundle = {"schema_version": "bank-reconciliation.v1", "reports": []}

    nuke_dir(Path("results_audit"))
    for pdf_path in args:
        report = process_pdf(pdf_path, extractor, save_artifacts=True)
        bundle["reports"].append({"file": Path(pdf_path).name, **report})

    Path("results").mkdir(parents=True, exist_ok=True)
    bundle_out = Path("results") / "reconciliation_bundle.json"
    with open(bundle_out, "w", encoding="utf-8") as f:
        json.dump(bundle, f, ensure_ascii=False, indent=2)
    print(f"\n✅ Bundle saved to {bundle_out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
