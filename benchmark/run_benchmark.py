# -*- coding: utf-8 -*-
"""
Resolver benchmark - primary OEM vs expected OEM

Reads a CSV of labelled queries, resolves each one and writes a timestamped
CSV with the primary OEM, its confidence and whether it matches the label.

Input columns:
    raw_query, expected_oem (required)
    brand, model, year, engine_code, part_query, vin (optional hints)

Usage:
    python -m benchmark.run_benchmark --input labelled.csv [--profile provider_sum]

Queries run one after another, like a batch. Provider fetches inside one
query follow MAX_PROVIDER_WORKERS.
"""
import argparse
import csv
import os
import sys
import time
from datetime import datetime
from typing import Dict, List

# Add parent directory to path so we can import project modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fusion import SCORING_PROFILES
from models import RawQuery, ResolutionOutput
from normalizers import normalize_oem
from registry import build_default_registry
from resolver import OemResolver

# ============================================================================
# CONFIGURATION
# ============================================================================

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)))
PROGRESS_EVERY = 10

HINT_COLUMNS = ('brand', 'model', 'year', 'engine_code', 'part_query', 'vin')

OUTPUT_COLUMNS = [
    'raw_query', 'expected_oem',
    'brand', 'part_query', 'year', 'model', 'engine_code',
    'primary_oem', 'primary_confidence', 'primary_providers', 'decision',
    'candidate_count', 'expected_rank', 'hit',
]


def load_input_csv(path: str) -> List[Dict]:
    """Load the labelled CSV into a list of dicts."""
    with open(path, 'r', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def row_to_query(row: Dict) -> RawQuery:
    hints = {k: row[k] for k in HINT_COLUMNS if row.get(k)}
    if 'year' in hints:
        hints['year'] = int(hints['year'])
    return RawQuery(raw_query=row['raw_query'], **hints)


def evaluate_row(row: Dict, output: ResolutionOutput) -> Dict:
    """Compare one resolution against its label."""
    expected = normalize_oem(row.get('expected_oem', ''))
    parsed = output.parsed_query
    primary = output.primary

    ranked_oems = [r.oem for r in output.candidates]
    expected_rank = ranked_oems.index(expected) + 1 if expected in ranked_oems else ''

    return {
        'raw_query': row['raw_query'],
        'expected_oem': expected,
        'brand': parsed.normalized_brand or '',
        'part_query': parsed.part_query or '',
        'year': parsed.year or '',
        'model': parsed.model or '',
        'engine_code': parsed.engine_code or '',
        'primary_oem': primary.oem if primary else '',
        'primary_confidence': f"{primary.confidence:.2f}" if primary else '',
        'primary_providers': '|'.join(primary.providers) if primary else '',
        'decision': output.decision,
        'candidate_count': len(output.candidates),
        'expected_rank': expected_rank,
        'hit': bool(primary) and primary.oem == expected,
    }


def resolve_rows(resolver: OemResolver, rows: List[Dict]) -> List[Dict]:
    """Resolve and evaluate rows in order, one query at a time."""
    total = len(rows)
    results = []
    for i, row in enumerate(rows):
        output = resolver.resolve(row_to_query(row))
        results.append(evaluate_row(row, output))
        if (i + 1) % PROGRESS_EVERY == 0 or (i + 1) == total:
            print(f"  [{i+1}/{total}] {row['raw_query']} -> {output.decision}")
    return results


def main(argv=None):
    parser = argparse.ArgumentParser(description='Benchmark the OEM resolver against labelled queries')
    parser.add_argument('--input', '-i', required=True, help='Labelled CSV')
    parser.add_argument('--output-dir', '-o', default=OUTPUT_DIR)
    parser.add_argument('--profile', choices=sorted(SCORING_PROFILES), default=None)
    args = parser.parse_args(argv)

    print("=" * 70)
    print("OEM Resolver Benchmark")
    print("=" * 70)

    # 1. Load input CSV
    print(f"\n[1/3] Loading input CSV...")
    if not os.path.exists(args.input):
        print(f"ERROR: Input CSV not found: {args.input}")
        sys.exit(1)

    rows = load_input_csv(args.input)
    total = len(rows)
    print(f"  Loaded {total} labelled rows")

    resolver = OemResolver(build_default_registry(), profile=args.profile)
    print(f"  Scoring profile: {resolver.profile_name}")

    # 2. Resolve
    print(f"\n[2/3] Resolving {total} queries...")
    start_time = time.time()

    results = resolve_rows(resolver, rows)
    print(f"  Resolution complete: {time.time() - start_time:.1f}s")

    # 3. Write output CSV
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    output_path = os.path.join(args.output_dir, f"benchmark_{timestamp}.csv")

    print(f"\n[3/3] Writing output CSV...")
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=OUTPUT_COLUMNS)
        writer.writeheader()
        for result in results:
            writer.writerow(result)
    print(f"  Output: {output_path}")

    # --- Summary stats ---
    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)

    if not total:
        print("\nNo rows.")
        return

    hits = sum(1 for r in results if r['hit'])
    in_list = sum(1 for r in results if r['expected_rank'] != '')
    print(f"\nTotal rows:           {total}")
    print(f"Primary == expected:  {hits} ({hits/total*100:.1f}%)")
    print(f"Expected in ranking:  {in_list} ({in_list/total*100:.1f}%)")

    decision_counts = {}
    for r in results:
        decision_counts[r['decision']] = decision_counts.get(r['decision'], 0) + 1

    print(f"\nDecision distribution:")
    for decision in ['CONFIRMED', 'LIKELY', 'POSSIBLE', 'UNLIKELY', 'NO_CANDIDATES', 'NO_PROVIDER']:
        count = decision_counts.get(decision, 0)
        if count > 0:
            print(f"  {decision:<15} {count:>4} ({count/total*100:.1f}%)")


if __name__ == "__main__":
    main()
