# -*- coding: utf-8 -*-
"""
MongoDB sink for resolution outputs.

Optional: only used when MONGO_URI is configured (see config.py).
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List

from pymongo import MongoClient

import config
from models import ResolutionOutput

logger = logging.getLogger(__name__)

_client = None


def get_mongo_client() -> MongoClient:
    """Get singleton MongoDB client."""
    global _client
    if _client is None:
        _client = MongoClient(config.MONGO_URI)
    return _client


def get_collection():
    return get_mongo_client()[config.RESULTS_DB][config.RESULTS_COLLECTION]


def to_document(output: ResolutionOutput, stored_at: datetime) -> Dict:
    """Flatten an output into a document; primary OEM is lifted for indexing."""
    doc = output.model_dump(mode='json')
    doc['primary_oem'] = output.primary.oem if output.primary else None
    doc['stored_at'] = stored_at
    return doc


def push_outputs(outputs: List[ResolutionOutput]) -> Dict:
    """
    Store resolution outputs.

    Returns:
        Dict with success flag and inserted count (or the error)
    """
    if not config.MONGO_URI:
        return {'success': False, 'error': 'MONGO_URI not set'}
    if not outputs:
        return {'success': True, 'inserted': 0}

    stored_at = datetime.now(timezone.utc)
    try:
        result = get_collection().insert_many([to_document(o, stored_at) for o in outputs])
        return {'success': True, 'inserted': len(result.inserted_ids)}
    except Exception as e:
        logger.error(f"Error storing resolution outputs: {e}")
        return {'success': False, 'error': str(e)}


def test_connection() -> Dict:
    """
    Test MongoDB connection and return stats.

    Returns:
        Dict with connection status and stored document count
    """
    if not config.MONGO_URI:
        return {'connected': False, 'error': 'MONGO_URI not set'}

    try:
        count = get_collection().count_documents({})
        return {
            'connected': True,
            'database': config.RESULTS_DB,
            'collection': config.RESULTS_COLLECTION,
            'stored_count': count,
        }
    except Exception as e:
        return {
            'connected': False,
            'error': str(e)
        }
