# -*- coding: utf-8 -*-
"""
OEM Resolver - HTTP service and CLI

Resolves free-text vehicle-part queries ("2014 VW Golf spark plug") to
manufacturer part numbers by querying several parts catalogs and fusing their
answers into one ranked, confidence-scored list.

Usage:
    python main.py                                 # run the HTTP service
    python main.py --query "2014 VW Golf spark plug"
    python main.py --input batch.json [--store]
"""
import argparse
import json
import logging
import socket
import sys
from typing import Any, Dict, List

import uvicorn
from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

import config
import results_store
from fusion import DEFAULT_PROFILE, PROVIDER_WEIGHTS, SCORING_PROFILES
from models import BatchValidationError, ParsedQuery, RawQuery, ResolutionOutput
from registry import build_default_registry
from resolver import OemResolver

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ============================================================================
# RESOLVER
# ============================================================================

registry = build_default_registry()
resolver = OemResolver(registry)


def get_resolver() -> OemResolver:
    return resolver


# ============================================================================
# FASTAPI APPLICATION
# ============================================================================

app = FastAPI(
    title="OEM Resolver",
    description="Multi-source OEM part number resolution with candidate fusion",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/stats")
async def stats():
    """Get application status."""
    r = get_resolver()
    return {
        "status": "ready",
        "version": VERSION,
        "providers": [p.id for p in r.registry],
        "scoring_profile": r.profile_name,
        "min_oem_length": r.min_oem_length,
        "max_provider_workers": r.max_workers,
        "results_store": "mongodb" if config.MONGO_URI else None,
    }


@app.get("/api/profiles")
async def list_profiles():
    """Get available scoring profiles and provider trust weights."""
    return {
        'profiles': SCORING_PROFILES,
        'default': DEFAULT_PROFILE,
        'active': get_resolver().profile_name,
        'provider_weights': PROVIDER_WEIGHTS,
    }


@app.get("/api/providers")
async def list_providers():
    """Get registered providers and the brands they serve."""
    return {'providers': [p.describe() for p in get_resolver().registry]}


@app.post("/api/parse", response_model=ParsedQuery)
def parse(query: RawQuery):
    """Parse a query without calling any provider."""
    return get_resolver().parse(query)


@app.post("/api/resolve", response_model=List[ResolutionOutput])
def resolve(
    payload: Dict[str, Any] = Body(..., description="A query object or {queries: [...]}"),
    store: bool = Query(default=False, description="Push outputs to the results store"),
):
    """Resolve one query or a batch of queries."""
    try:
        outputs = get_resolver().resolve_batch(payload)
    except BatchValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if store:
        result = results_store.push_outputs(outputs)
        if not result["success"]:
            logger.warning(f"Results not stored: {result['error']}")

    return outputs


# ============================================================================
# CLI
# ============================================================================

def find_available_port(start_port=8000, max_attempts=10):
    """Find an available port starting from start_port."""
    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((config.API_HOST, port))
                return port
        except OSError:
            continue
    return None


def build_cli_payload(args) -> Dict[str, Any]:
    """Batch payload from --input or --query and hint flags."""
    if args.input:
        with open(args.input, 'r', encoding='utf-8') as f:
            return json.load(f)

    payload = {'rawQuery': args.query}
    hints = {
        'brand': args.brand,
        'model': args.model,
        'year': args.year,
        'engineCode': args.engine_code,
        'partQuery': args.part,
        'vin': args.vin,
    }
    payload.update({k: v for k, v in hints.items() if v is not None})
    return payload


def run_batch(args) -> int:
    try:
        outputs = get_resolver().resolve_batch(build_cli_payload(args))
    except (BatchValidationError, json.JSONDecodeError, OSError) as e:
        print(f"ERROR: invalid input: {e}", file=sys.stderr)
        return 2

    print(json.dumps([o.model_dump(mode='json') for o in outputs], indent=2, ensure_ascii=False))

    if args.store:
        result = results_store.push_outputs(outputs)
        if result["success"]:
            print(f"Stored {result['inserted']} output(s)", file=sys.stderr)
        else:
            print(f"WARNING: results not stored: {result['error']}", file=sys.stderr)

    return 0


def run_server(args) -> int:
    print("=" * 60)
    print(f"OEM Resolver v{VERSION}")
    print("=" * 60)

    port = args.port or find_available_port(config.API_PORT)
    if port is None:
        print(f"\nERROR: Could not find an available port ({config.API_PORT}-{config.API_PORT + 9}).")
        return 1

    print(f"\nProviders: {', '.join(p.id for p in registry)}")
    print(f"Scoring profile: {resolver.profile_name}")

    if config.MONGO_URI:
        conn_test = results_store.test_connection()
        if conn_test.get('connected'):
            print(f"Results store: {conn_test['database']}.{conn_test['collection']}")
        else:
            print(f"WARNING: results store unavailable: {conn_test.get('error')}")

    print(f"\nStarting server at http://{config.API_HOST}:{port}")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(app, host=config.API_HOST, port=port, log_level="warning")
    return 0


def main(argv=None) -> int:
    global resolver

    parser = argparse.ArgumentParser(description='Resolve vehicle-part queries to OEM numbers')
    parser.add_argument('--input', '-i', type=str, help='JSON file: a query object or {"queries": [...]}')
    parser.add_argument('--query', '-q', type=str, help='Free-text query, e.g. "2014 VW Golf spark plug"')
    parser.add_argument('--brand', type=str)
    parser.add_argument('--model', type=str)
    parser.add_argument('--year', type=int)
    parser.add_argument('--engine-code', type=str)
    parser.add_argument('--part', type=str)
    parser.add_argument('--vin', type=str)
    parser.add_argument('--profile', type=str, choices=sorted(SCORING_PROFILES), help='Scoring profile')
    parser.add_argument('--store', action='store_true', help='Push outputs to MongoDB (needs MONGO_URI)')
    parser.add_argument('--port', type=int, help='Server port (default: first free from API_PORT)')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    if args.profile:
        resolver = OemResolver(registry, profile=args.profile)

    if args.input or args.query:
        return run_batch(args)
    return run_server(args)


if __name__ == "__main__":
    sys.exit(main())
